"""
Family record model.

A ``Family`` is one numbered entry of the parish book (``KORPI 6``): one or
more couples, their children, free-text notes and footnote definitions.
Records arrive already structured (see ``family_xref.sources``); this module
only models them and offers the convenience views the resolver and the
citation layer need.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from family_xref.core.exceptions import InvalidFamilyError
from family_xref.dates.formatter import extract_year
from family_xref.identity.person_key import normalize_family_id  # noqa: F401  re-exported


def _get(data: Dict[str, Any], *keys: str) -> Any:
    """Return the first non-None value among snake_case / camelCase aliases."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    out = str(value).strip()
    return out or None


# -----------------------------
# Person
# -----------------------------

@dataclass(slots=True)
class Person:
    name: str
    patronymic: Optional[str] = None
    birth_date: Optional[str] = None
    death_date: Optional[str] = None

    # Nuclear records often carry only a 2-digit year ("73"); the
    # person's own adult family has the full date ("14.10.1773").
    marriage_date: Optional[str] = None
    full_marriage_date: Optional[str] = None

    spouse: Optional[str] = None

    # Cross references ({KORPI 5} notation in the source text)
    as_child: Optional[str] = None
    as_parent: Optional[str] = None

    family_search_id: Optional[str] = None
    note_markers: List[str] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        if self.patronymic:
            return f"{self.name} {self.patronymic}"
        return self.name

    @property
    def best_marriage_date(self) -> Optional[str]:
        return self.full_marriage_date or self.marriage_date

    @property
    def is_married(self) -> bool:
        return bool(self.spouse) or self.marriage_date is not None or self.full_marriage_date is not None

    @property
    def birth_year(self) -> Optional[int]:
        return extract_year(self.birth_date)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Person":
        if not isinstance(data, dict):
            raise InvalidFamilyError(None, f"person record must be an object, got {type(data).__name__}")

        markers = _get(data, "note_markers", "noteMarkers") or []
        if isinstance(markers, str):
            markers = [markers]

        return cls(
            name=str(_get(data, "name") or "").strip(),
            patronymic=_opt_str(_get(data, "patronymic")),
            birth_date=_opt_str(_get(data, "birth_date", "birthDate")),
            death_date=_opt_str(_get(data, "death_date", "deathDate")),
            marriage_date=_opt_str(_get(data, "marriage_date", "marriageDate")),
            full_marriage_date=_opt_str(_get(data, "full_marriage_date", "fullMarriageDate")),
            spouse=_opt_str(_get(data, "spouse")),
            as_child=_opt_str(_get(data, "as_child", "asChild", "as_child_reference", "asChildReference")),
            as_parent=_opt_str(_get(data, "as_parent", "asParent", "as_parent_reference", "asParentReference")),
            family_search_id=_opt_str(_get(data, "family_search_id", "familySearchId")),
            note_markers=[str(m) for m in markers],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "patronymic": self.patronymic,
            "birth_date": self.birth_date,
            "death_date": self.death_date,
            "marriage_date": self.marriage_date,
            "full_marriage_date": self.full_marriage_date,
            "spouse": self.spouse,
            "as_child": self.as_child,
            "as_parent": self.as_parent,
            "family_search_id": self.family_search_id,
            "note_markers": list(self.note_markers),
        }


# -----------------------------
# Couple
# -----------------------------

@dataclass(slots=True)
class Couple:
    husband: Person
    wife: Person
    marriage_date: Optional[str] = None
    full_marriage_date: Optional[str] = None
    children: List[Person] = field(default_factory=list)
    children_died_infancy: Optional[int] = None
    couple_notes: List[str] = field(default_factory=list)

    @property
    def best_marriage_date(self) -> Optional[str]:
        return self.full_marriage_date or self.marriage_date

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Couple":
        if not isinstance(data, dict):
            raise InvalidFamilyError(None, f"couple record must be an object, got {type(data).__name__}")

        husband = _get(data, "husband")
        wife = _get(data, "wife")
        if husband is None or wife is None:
            raise InvalidFamilyError(None, "couple requires both husband and wife")

        died = _get(data, "children_died_infancy", "childrenDiedInfancy")
        try:
            died = int(died) if died is not None else None
        except (TypeError, ValueError):
            raise InvalidFamilyError(None, f"children_died_infancy is not a number: {died!r}")

        return cls(
            husband=Person.from_dict(husband),
            wife=Person.from_dict(wife),
            marriage_date=_opt_str(_get(data, "marriage_date", "marriageDate")),
            full_marriage_date=_opt_str(_get(data, "full_marriage_date", "fullMarriageDate")),
            children=[Person.from_dict(c) for c in (_get(data, "children") or [])],
            children_died_infancy=died,
            couple_notes=[str(n) for n in (_get(data, "couple_notes", "coupleNotes") or [])],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "husband": self.husband.to_dict(),
            "wife": self.wife.to_dict(),
            "marriage_date": self.marriage_date,
            "full_marriage_date": self.full_marriage_date,
            "children": [c.to_dict() for c in self.children],
            "children_died_infancy": self.children_died_infancy,
            "couple_notes": list(self.couple_notes),
        }


# -----------------------------
# Family
# -----------------------------

@dataclass(slots=True)
class Family:
    family_id: str
    page_references: List[str]
    couples: List[Couple]
    notes: List[str] = field(default_factory=list)
    note_definitions: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.couples:
            raise InvalidFamilyError(self.family_id, "a family needs at least one couple")

    # ---------- Convenience views ----------

    @property
    def primary_couple(self) -> Couple:
        return self.couples[0]

    @property
    def additional_couples(self) -> List[Couple]:
        return self.couples[1:]

    @property
    def all_parents(self) -> List[Person]:
        parents: List[Person] = []
        for couple in self.couples:
            parents.append(couple.husband)
            parents.append(couple.wife)
        return parents

    @property
    def all_children(self) -> List[Person]:
        return [child for couple in self.couples for child in couple.children]

    @property
    def married_children(self) -> List[Person]:
        return [child for child in self.all_children if child.is_married]

    @property
    def total_children_died_infancy(self) -> int:
        return sum(c.children_died_infancy or 0 for c in self.couples)

    @property
    def page_reference_string(self) -> str:
        if len(self.page_references) == 1:
            return f"page {self.page_references[0]}"
        return f"pages {', '.join(self.page_references)}"

    @property
    def is_valid(self) -> bool:
        return bool(self.family_id) and bool(self.page_references) and bool(self.couples)

    def find_spouse_of(self, person_name: str) -> Optional[Person]:
        """Return the partner of ``person_name`` (name or display name) in any couple."""
        wanted = person_name.strip().lower()
        for couple in self.couples:
            if wanted in (couple.husband.name.strip().lower(), couple.husband.display_name.strip().lower()):
                return couple.wife
            if wanted in (couple.wife.name.strip().lower(), couple.wife.display_name.strip().lower()):
                return couple.husband
        return None

    def couple_of(self, person_name: str) -> Optional[Couple]:
        """Return the first couple in which ``person_name`` is husband or wife."""
        wanted = person_name.strip().lower()
        for couple in self.couples:
            if couple.husband.name.strip().lower() == wanted or couple.wife.name.strip().lower() == wanted:
                return couple
        return None

    def validate_structure(self) -> List[str]:
        warnings: List[str] = []

        if not self.family_id:
            warnings.append("Family ID is required")
        if not self.page_references:
            warnings.append("Page references are required")

        for index, couple in enumerate(self.couples, start=1):
            if not couple.husband.name:
                warnings.append(f"Couple {index}: Husband name is required")
            if not couple.wife.name:
                warnings.append(f"Couple {index}: Wife name is required")

            child_names = [c.name.lower() for c in couple.children]
            if len(child_names) != len(set(child_names)):
                warnings.append(f"Couple {index}: Duplicate child names found")

        return warnings

    # ---------- Serialization ----------

    @classmethod
    def from_dict(cls, data: Dict[str, Any], family_id: Optional[str] = None) -> "Family":
        """
        Build a Family from a structured record.

        Accepts either a ``couples`` list or the single-couple shorthand
        (``husband`` / ``wife`` / ``children`` at the top level).
        """
        if not isinstance(data, dict):
            raise InvalidFamilyError(family_id, f"family record must be an object, got {type(data).__name__}")

        fid = _opt_str(_get(data, "family_id", "familyId")) or family_id
        if not fid:
            raise InvalidFamilyError(family_id, "family record has no family_id")

        pages = _get(data, "page_references", "pageReferences") or []
        if isinstance(pages, (str, int)):
            pages = [pages]

        raw_couples = _get(data, "couples")
        if raw_couples is None and _get(data, "husband") is not None:
            raw_couples = [data]
        if not isinstance(raw_couples, list):
            raise InvalidFamilyError(fid, "couples must be a list")

        try:
            couples = [Couple.from_dict(c) for c in raw_couples]
        except InvalidFamilyError as exc:
            raise InvalidFamilyError(fid, exc.reason) from exc

        defs = _get(data, "note_definitions", "noteDefinitions") or {}
        if not isinstance(defs, dict):
            raise InvalidFamilyError(fid, "note_definitions must be an object")

        return cls(
            family_id=fid,
            page_references=[str(p) for p in pages],
            couples=couples,
            notes=[str(n) for n in (_get(data, "notes") or [])],
            note_definitions={str(k): str(v) for k, v in defs.items()},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "family_id": self.family_id,
            "page_references": list(self.page_references),
            "couples": [c.to_dict() for c in self.couples],
            "notes": list(self.notes),
            "note_definitions": dict(self.note_definitions),
        }
