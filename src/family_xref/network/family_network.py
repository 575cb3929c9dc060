"""
Resolved family network for one extraction request.

One main ``Family`` plus three lookup tables:

    as_child_of         person -> the family they were born into
    as_parent_of        person -> the family they head as a parent
    spouse_as_child_of  spouse -> the spouse's own birth family

Persons have no stable identity across records, so every resolution is
stored under each string form of its ``PersonKey`` and lookups try those
forms most-specific first. A partial key that ends up naming two different
families (two "Matti" in one run) is marked ambiguous and no longer
answers lookups; the more specific forms still do.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from family_xref.entities import Family, Person
from family_xref.identity.person_key import PersonKey, normalize_family_id


@dataclass(slots=True)
class _LinkTable:
    families: Dict[str, Family] = field(default_factory=dict)
    ambiguous: Set[str] = field(default_factory=set)

    def store(self, key: PersonKey, family: Family) -> None:
        for variant in key.variants():
            if variant in self.ambiguous:
                continue
            current = self.families.get(variant)
            if current is not None and current.family_id != family.family_id:
                del self.families[variant]
                self.ambiguous.add(variant)
                continue
            self.families[variant] = family

    def lookup(self, key: PersonKey) -> Optional[Family]:
        for variant in key.variants():
            found = self.families.get(variant)
            if found is not None:
                return found
        return None

    def family_ids(self) -> List[str]:
        return sorted({f.family_id for f in self.families.values()})


class FamilyNetwork:
    def __init__(self, main_family: Family):
        self.main_family = main_family
        self._as_child = _LinkTable()
        self._as_parent = _LinkTable()
        self._spouse_as_child = _LinkTable()

    @property
    def main_family_id(self) -> str:
        return self.main_family.family_id

    def _key(self, person: Person, origin_family_id: Optional[str]) -> PersonKey:
        return PersonKey.of(person, origin_family_id or self.main_family_id)

    # ---------- Storing ----------

    def store_as_child(self, person: Person, family: Family, origin_family_id: Optional[str] = None) -> None:
        self._as_child.store(self._key(person, origin_family_id), family)

    def store_as_parent(self, person: Person, family: Family, origin_family_id: Optional[str] = None) -> None:
        self._as_parent.store(self._key(person, origin_family_id), family)

    def store_spouse_as_child(self, person: Person, family: Family, origin_family_id: Optional[str] = None) -> None:
        self._spouse_as_child.store(self._key(person, origin_family_id), family)

    # ---------- Lookups ----------

    def as_child_family(self, person: Person, origin_family_id: Optional[str] = None) -> Optional[Family]:
        return self._as_child.lookup(self._key(person, origin_family_id))

    def as_parent_family(self, person: Person, origin_family_id: Optional[str] = None) -> Optional[Family]:
        return self._as_parent.lookup(self._key(person, origin_family_id))

    def spouse_as_child_family(self, person: Person, origin_family_id: Optional[str] = None) -> Optional[Family]:
        return self._spouse_as_child.lookup(self._key(person, origin_family_id))

    def lookup_key(self, table: str, key: str) -> Optional[Family]:
        """Raw lookup of one string key in ``as_child``, ``as_parent`` or ``spouse_as_child``."""
        return self._table(table).families.get(key)

    def _table(self, name: str) -> _LinkTable:
        tables = {
            "as_child": self._as_child,
            "as_parent": self._as_parent,
            "spouse_as_child": self._spouse_as_child,
        }
        if name not in tables:
            raise KeyError(f"unknown link table: {name}")
        return tables[name]

    # ---------- Summaries ----------

    def all_families(self) -> List[Family]:
        """Main family first, then every linked family once, by id."""
        seen = {normalize_family_id(self.main_family_id)}
        out: List[Family] = [self.main_family]
        for table in (self._as_child, self._as_parent, self._spouse_as_child):
            for family in table.families.values():
                fid = normalize_family_id(family.family_id)
                if fid in seen:
                    continue
                seen.add(fid)
                out.append(family)
        return out

    @property
    def total_resolved(self) -> int:
        return len(self.all_families()) - 1

    def debug_summary(self) -> str:
        lines = [
            f"Family network for {self.main_family_id}",
            f"  as_child:        {', '.join(self._as_child.family_ids()) or '-'}",
            f"  as_parent:       {', '.join(self._as_parent.family_ids()) or '-'}",
            f"  spouse_as_child: {', '.join(self._spouse_as_child.family_ids()) or '-'}",
            f"  linked families: {self.total_resolved}",
        ]
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        def _ids(table: _LinkTable) -> Dict[str, str]:
            return {k: f.family_id for k, f in sorted(table.families.items())}

        return {
            "main_family": self.main_family_id,
            "as_child": _ids(self._as_child),
            "as_parent": _ids(self._as_parent),
            "spouse_as_child": _ids(self._spouse_as_child),
            "total_resolved": self.total_resolved,
        }
