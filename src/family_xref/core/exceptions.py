from __future__ import annotations

from typing import Optional


class FamilyXrefError(Exception):
    """Base exception for cross-reference failures."""


class LookupFailure(FamilyXrefError):
    """Raised when a referenced family id has no source text."""

    def __init__(self, family_id: str):
        super().__init__(f"Family '{family_id}' not found in source")
        self.family_id = family_id


class ParseFailure(FamilyXrefError):
    """Raised when a family record cannot be parsed into a Family."""

    def __init__(self, family_id: Optional[str], reason: str):
        label = family_id or "<unknown>"
        super().__init__(f"Could not parse family '{label}': {reason}")
        self.family_id = family_id
        self.reason = reason


class InvalidFamilyError(ParseFailure):
    """Raised when a record cannot form a valid Family (no couples, missing spouse)."""


class ValidationFailure(FamilyXrefError):
    """Raised when a resolved candidate does not contain the expected person."""

    def __init__(self, family_id: str, person: str):
        super().__init__(f"'{person}' not found in candidate family '{family_id}'")
        self.family_id = family_id
        self.person = person
