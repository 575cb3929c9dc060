# src/family_xref/identity/person_key.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from family_xref.entities import Person


# -----------------------------
# Text normalization
# -----------------------------

_WS_RE = re.compile(r"\s+")


def normalize_text(value: Optional[str]) -> str:
    """Trim, collapse whitespace and case-fold."""
    if not value:
        return ""
    return _WS_RE.sub(" ", value).strip().casefold()


def normalize_family_id(ref: Optional[str]) -> Optional[str]:
    """
    Normalize a family reference:
      - strip the {} braces used in the source text ("{KORPI 5}")
      - collapse whitespace
      - uppercase
    """
    if ref is None:
        return None

    r = ref.strip().strip("{}").strip()
    r = _WS_RE.sub(" ", r).upper()
    return r or None


# -----------------------------
# Composite key
# -----------------------------

@dataclass(frozen=True, slots=True)
class PersonKey:
    """
    Identity of a person inside one resolution run.

    Records carry no stable identifier, so a person is known by the
    combination of normalized name, patronymic, birth year and the family
    record they were read from. ``variants()`` lists the string forms a
    lookup tries, most specific first.
    """

    name: str
    patronymic: str = ""
    birth_year: Optional[int] = None
    family_id: Optional[str] = None

    @classmethod
    def of(cls, person: "Person", family_id: Optional[str] = None) -> "PersonKey":
        return cls(
            name=normalize_text(person.name),
            patronymic=normalize_text(person.patronymic),
            birth_year=person.birth_year,
            family_id=normalize_family_id(family_id),
        )

    def variants(self) -> List[str]:
        keys: List[str] = []
        if self.birth_year is not None:
            keys.append(f"{self.name}|{self.birth_year}")
        if self.family_id:
            keys.append(f"{self.name}@{self.family_id}")
        if self.patronymic:
            keys.append(f"{self.name} {self.patronymic}")
        keys.append(self.name)
        return keys

    def __str__(self) -> str:
        return self.variants()[0]
