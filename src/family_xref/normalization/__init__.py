"""
family_xref.normalization

Name-variant handling shared by identity matching and the CLI.
"""

from .name_equivalence import (
    DEFAULT_EQUIVALENCES,
    EquivalenceStatistics,
    EquivalenceStore,
    NameEquivalenceIndex,
    NameEquivalenceSnapshot,
    normalize_name,
    open_index,
)

__all__ = [
    "DEFAULT_EQUIVALENCES",
    "EquivalenceStatistics",
    "EquivalenceStore",
    "NameEquivalenceIndex",
    "NameEquivalenceSnapshot",
    "normalize_name",
    "open_index",
]
