"""
Citation text for family records.

Three citations are produced for a family network:

- main family      the nuclear family itself
- as child         a person's birth family, with the person's row marked
- spouse as child  the spouse's birth family

A marked (target) row is enhanced from the person's adult family when the
network resolved one: death date and fuller marriage date are taken from
there and an "Additional Information" line names the pages they came from.

Everything here is a pure function of its arguments.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Set, Tuple

from family_xref.dates.formatter import format_date, format_marriage_year
from family_xref.entities import Couple, Family, Person
from family_xref.identity.matcher import EquivalenceLookup, find_same
from family_xref.identity.person_key import PersonKey, normalize_text
from family_xref.network.family_network import FamilyNetwork

ARROW = "→ "
WIDOW_WORD = "leski"


# -----------------------------
# Public API
# -----------------------------

def render_main_family(
    family: Family,
    target: Optional[Person] = None,
    network: Optional[FamilyNetwork] = None,
    equivalences: Optional[EquivalenceLookup] = None,
    *,
    target_is_parent: bool = False,
) -> str:
    """
    Citation for the family the target heads or was born into.

    With ``target_is_parent`` the target is marked among the parents and
    no child row is enhanced, so a son who shares his father's name
    keeps his own line.
    """
    return _render(family, target, network, equivalences, as_child=False, target_is_parent=target_is_parent)


def render_as_child_family(
    person: Person,
    as_child_family: Family,
    network: Optional[FamilyNetwork] = None,
    equivalences: Optional[EquivalenceLookup] = None,
) -> str:
    return _render(as_child_family, person, network, equivalences, as_child=True)


def render_spouse_as_child_family(
    spouse_name: str,
    family: Family,
    network: Optional[FamilyNetwork] = None,
    equivalences: Optional[EquivalenceLookup] = None,
) -> str:
    return render_as_child_family(person_from_name(spouse_name), family, network, equivalences)


def person_from_name(text: str) -> Person:
    """``"Antti Antinp."`` -> Person(name="Antti", patronymic="Antinp.")."""
    parts = text.split()
    if len(parts) > 1 and parts[-1].endswith("."):
        return Person(name=" ".join(parts[:-1]), patronymic=parts[-1])
    return Person(name=text.strip())


# -----------------------------
# Enhancement
# -----------------------------

@dataclass(slots=True)
class _Enhancement:
    child: Person
    adult_family: Family
    adult_person: Person
    couple: Optional[Couple]

    @property
    def death_date(self) -> Optional[str]:
        return self.adult_person.death_date or self.child.death_date

    @property
    def linked_marriage_date(self) -> Optional[str]:
        if self.adult_person.best_marriage_date:
            return self.adult_person.best_marriage_date
        if self.couple is not None:
            return self.couple.best_marriage_date
        return None

    @property
    def marriage_date(self) -> Optional[str]:
        return self.linked_marriage_date or self.child.best_marriage_date

    @property
    def spouse_name(self) -> Optional[str]:
        if self.child.spouse:
            return self.child.spouse
        if self.adult_person.spouse:
            return self.adult_person.spouse
        if self.couple is None:
            return None
        partner = self.couple.wife if self.couple.husband is self.adult_person else self.couple.husband
        return partner.display_name

    def new_facts(self) -> List[str]:
        facts: List[str] = []
        if _marriage_is_new(self.child.best_marriage_date, self.linked_marriage_date):
            facts.append("marriage date")
        if self.adult_person.death_date and not self.child.death_date:
            facts.append("death date")
        return facts


def _marriage_is_new(nuclear: Optional[str], linked: Optional[str]) -> bool:
    if not linked:
        return False
    linked = linked.strip()
    if not nuclear:
        return True
    nuclear = nuclear.strip()
    if len(linked) >= 8 and len(nuclear) <= 4:
        return True
    return linked != nuclear


def _find_enhancement(
    child: Person,
    target: Person,
    family: Family,
    network: Optional[FamilyNetwork],
    equivalences: Optional[EquivalenceLookup],
) -> Optional[_Enhancement]:
    if network is None or not child.is_married:
        return None

    adult_family = network.as_parent_family(target) or network.as_parent_family(child, family.family_id)
    if adult_family is None:
        return None

    adult_person = _locate_adult(child, adult_family, equivalences)
    if adult_person is None:
        return None

    couple = next(
        (c for c in adult_family.couples if c.husband is adult_person or c.wife is adult_person),
        None,
    )
    return _Enhancement(child, adult_family, adult_person, couple)


def _locate_adult(child: Person, family: Family, equivalences: Optional[EquivalenceLookup]) -> Optional[Person]:
    birth = (child.birth_date or "").strip()
    if birth:
        for parent in family.all_parents:
            if (parent.birth_date or "").strip() == birth:
                return parent
    return find_same(child, family.all_parents, equivalences)


def _locate_target(candidates: List[Person], target: Person, equivalences: Optional[EquivalenceLookup]) -> Optional[Person]:
    """Birth-date match wins over a name match; rows reuse names of children who died young."""
    for candidate in candidates:
        if candidate is target:
            return candidate
    birth = (target.birth_date or "").strip()
    if birth:
        for candidate in candidates:
            if (candidate.birth_date or "").strip() == birth:
                return candidate
    return find_same(target, candidates, equivalences)


# -----------------------------
# Line formatting
# -----------------------------

def _with_markers(line: str, person: Person) -> str:
    if person.note_markers:
        return f"{line} {' '.join(person.note_markers)}"
    return line


def _life_span(birth: Optional[str], death: Optional[str]) -> str:
    if birth and death:
        return f", {format_date(birth)} - {format_date(death)}"
    if birth:
        return f", b. {format_date(birth)}"
    if death:
        return f", d. {format_date(death)}"
    return ""


def _parent_line(person: Person, widow_of: Optional[str] = None) -> str:
    line = person.display_name
    if widow_of:
        line += f", widow of {widow_of}"
    line += _life_span(person.birth_date, person.death_date)
    return _with_markers(line, person)


def _couple_marriage_line(couple: Couple) -> Optional[str]:
    if couple.full_marriage_date:
        return f"m. {format_date(couple.full_marriage_date)}"
    if couple.marriage_date:
        anchor = couple.husband.birth_year or couple.wife.birth_year
        return f"m. {format_marriage_year(couple.marriage_date, anchor)}"
    return None


def _child_line(child: Person) -> str:
    line = child.name
    if child.birth_date:
        line += f", b. {format_date(child.birth_date)}"

    marriage = child.best_marriage_date
    if child.spouse:
        line += f", m. {child.spouse}"
        if marriage:
            line += f" {format_marriage_year(marriage, child.birth_year)}"
    elif marriage:
        line += f", m. {format_marriage_year(marriage, child.birth_year)}"

    if child.death_date:
        line += f", d. {format_date(child.death_date)}"
    return _with_markers(line, child)


def _enhanced_child_line(enh: _Enhancement) -> str:
    child = enh.child
    line = child.name + _life_span(child.birth_date, enh.death_date)

    spouse = enh.spouse_name
    marriage = enh.marriage_date
    if spouse:
        line += f", m. {spouse}"
        if marriage:
            line += f" {format_marriage_year(marriage, child.birth_year)}"
    elif marriage:
        line += f", m. {format_marriage_year(marriage, child.birth_year)}"
    return _with_markers(line, child)


# -----------------------------
# Sections
# -----------------------------

def _additional_spouse(family: Family, couple: Couple) -> Person:
    """The partner who is new relative to the primary couple."""
    primary = family.primary_couple
    if normalize_text(couple.husband.name) == normalize_text(primary.husband.name):
        return couple.wife
    if normalize_text(couple.wife.name) == normalize_text(primary.wife.name):
        return couple.husband
    return couple.wife


def _is_widow_note(note: str) -> bool:
    return WIDOW_WORD in note.lower()


def _widow_of(family: Family, spouse_index: int) -> Optional[str]:
    """
    Name before "leski" in the n-th widow note, for the n-th additional spouse.

    Assumes widow notes are listed in the same order as the remarriages;
    the records do not link a note to a couple explicitly.
    """
    widow_notes = [n for n in family.notes if _is_widow_note(n)]
    if spouse_index >= len(widow_notes):
        return None

    note = widow_notes[spouse_index]
    cut = note.lower().find(" " + WIDOW_WORD)
    name = (note[:cut] if cut >= 0 else note).strip()
    return name or None


def _children_lines(
    children: List[Person],
    target_row: Optional[Person],
    enhancement: Optional[_Enhancement],
    as_child: bool = False,
) -> List[str]:
    if not children:
        return []
    lines = ["Children:"]
    for child in children:
        if child is target_row and (as_child or enhancement is not None):
            text = _enhanced_child_line(enhancement) if enhancement else _child_line(child)
            lines.append(ARROW + text)
        else:
            lines.append(_child_line(child))
    return lines


def _notes_lines(family: Family) -> List[str]:
    body: List[str] = [n for n in family.notes if not _is_widow_note(n)]
    for couple in family.couples:
        body.extend(couple.couple_notes)
    for marker in sorted(family.note_definitions):
        body.append(f"{marker} {family.note_definitions[marker]}")

    died = family.total_children_died_infancy
    if died > 0:
        body.append(f"Children died as infants: {died}")

    return ["Note:", *body] if body else []


def _additional_information(name: str, enh: Optional[_Enhancement]) -> List[str]:
    if enh is None:
        return []
    facts = enh.new_facts()
    if not facts:
        return []

    pages = enh.adult_family.page_reference_string
    if len(facts) == 2:
        return ["Additional Information:", f"{name}'s marriage date and death date found on {pages}"]
    return ["Additional Information:", f"{name}'s {facts[0]} found on {pages}"]


# -----------------------------
# Renderer
# -----------------------------

def _render(
    family: Family,
    target: Optional[Person],
    network: Optional[FamilyNetwork],
    equivalences: Optional[EquivalenceLookup],
    *,
    as_child: bool,
    target_is_parent: bool = False,
) -> str:
    target_row: Optional[Person] = None
    target_parent: Optional[Person] = None
    if target is not None and target_is_parent:
        target_parent = _locate_target(family.all_parents, target, equivalences)
    elif target is not None:
        target_row = _locate_target(family.all_children, target, equivalences)
        if target_row is None and not as_child:
            target_parent = _locate_target(family.all_parents, target, equivalences)

    enhancement = None
    if target is not None and target_row is not None:
        enhancement = _find_enhancement(target_row, target, family, network, equivalences)

    def _parent(person: Person, widow_of: Optional[str] = None) -> str:
        prefix = ARROW if person is target_parent else ""
        return prefix + _parent_line(person, widow_of)

    lines: List[str] = [f"Information on {family.page_reference_string} includes:"]

    primary = family.primary_couple
    lines.append(_parent(primary.husband))
    lines.append(_parent(primary.wife))
    marriage = _couple_marriage_line(primary)
    if marriage:
        lines.append(marriage)
    lines.extend(_children_lines(primary.children, target_row, enhancement, as_child))

    for index, couple in enumerate(family.additional_couples):
        spouse = _additional_spouse(family, couple)
        lines.append("Additional spouse:")
        lines.append(_parent(spouse, _widow_of(family, index)))
        marriage = _couple_marriage_line(couple)
        if marriage:
            lines.append(marriage)
        lines.extend(_children_lines(couple.children, target_row, enhancement, as_child))

    lines.extend(_notes_lines(family))

    if target_row is not None:
        lines.extend(_additional_information(target_row.name, enhancement))
    elif as_child and target is not None:
        birth = target.birth_date or "unknown"
        lines.append(f"WARNING: Could not match target person '{target.name}' (birth: {birth}) in this family.")

    return "\n".join(lines) + "\n"


def render_family_set(
    network: FamilyNetwork,
    equivalences: Optional[EquivalenceLookup] = None,
) -> List[Tuple[str, str]]:
    """
    All citations for a resolved network as ``(title, text)`` pairs:
    the main family, each parent's birth family, each married child's
    adult family and each such spouse's birth family.
    """
    family = network.main_family
    out: List[Tuple[str, str]] = [(family.family_id, render_main_family(family, network=network, equivalences=equivalences))]

    seen: Set[PersonKey] = set()
    for parent in family.all_parents:
        key = PersonKey.of(parent, family.family_id)
        if key in seen:
            continue
        seen.add(key)
        birth_family = network.as_child_family(parent)
        if birth_family is not None:
            title = f"{parent.display_name} as child ({birth_family.family_id})"
            out.append((title, render_as_child_family(parent, birth_family, network, equivalences)))

    for child in family.married_children:
        adult_family = network.as_parent_family(child)
        if adult_family is None:
            continue
        title = f"{child.name} as parent ({adult_family.family_id})"
        out.append((title, render_main_family(adult_family, child, network, equivalences, target_is_parent=True)))

        if not child.spouse:
            continue
        spouse = person_from_name(child.spouse)
        spouse_family = network.spouse_as_child_family(spouse, adult_family.family_id)
        if spouse_family is not None:
            title = f"{child.spouse} as child ({spouse_family.family_id})"
            out.append((title, render_spouse_as_child_family(child.spouse, spouse_family, network, equivalences)))

    return out
