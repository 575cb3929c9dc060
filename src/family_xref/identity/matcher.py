# src/family_xref/identity/matcher.py
from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional, Protocol

from family_xref.identity.person_key import normalize_text

if TYPE_CHECKING:
    from family_xref.entities import Person


class EquivalenceLookup(Protocol):
    def are_equivalent(self, a: str, b: str) -> bool: ...


def same_identity(a: "Person", b: "Person", index: Optional[EquivalenceLookup] = None) -> bool:
    """
    Decide whether two records describe the same person.

    Checked in order, first hit wins:
      1) both birth dates present and equal after trimming
      2) normalized names equal
      3) names equivalent per the name-equivalence index
    """
    birth_a = (a.birth_date or "").strip()
    birth_b = (b.birth_date or "").strip()
    if birth_a and birth_b and birth_a == birth_b:
        return True

    if normalize_text(a.name) == normalize_text(b.name):
        return True

    if index is not None and index.are_equivalent(a.name, b.name):
        return True

    return False


def find_same(person: "Person", candidates: Iterable["Person"], index: Optional[EquivalenceLookup] = None) -> Optional["Person"]:
    """Return the first candidate that ``same_identity`` accepts."""
    for candidate in candidates:
        if same_identity(person, candidate, index):
            return candidate
    return None
