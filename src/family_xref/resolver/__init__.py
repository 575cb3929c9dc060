from .xref_resolver import CrossReferenceResolver, ResolutionStatistics

__all__ = ["CrossReferenceResolver", "ResolutionStatistics"]
