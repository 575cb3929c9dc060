"""
family_xref.core

Shared building blocks: the exception taxonomy used by the resolver,
the record sources and the CLI.
"""

from .exceptions import (
    FamilyXrefError,
    InvalidFamilyError,
    LookupFailure,
    ParseFailure,
    ValidationFailure,
)

__all__ = [
    "FamilyXrefError",
    "InvalidFamilyError",
    "LookupFailure",
    "ParseFailure",
    "ValidationFailure",
]
