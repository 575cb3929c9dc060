# tests/test_entities.py

import pytest

from family_xref.core.exceptions import InvalidFamilyError, ParseFailure
from family_xref.entities import Couple, Family, Person, normalize_family_id


def _couple(**kwargs):
    return Couple(husband=Person(name="Matti"), wife=Person(name="Brita"), **kwargs)


def test_family_requires_a_couple():
    with pytest.raises(InvalidFamilyError):
        Family(family_id="KORPI 6", page_references=["105"], couples=[])


def test_invalid_family_error_is_a_parse_failure():
    assert issubclass(InvalidFamilyError, ParseFailure)


def test_person_views():
    p = Person(
        name="Erik",
        patronymic="Matinp.",
        birth_date="17.11.1755",
        marriage_date="78",
        full_marriage_date="02.11.1778",
    )
    assert p.display_name == "Erik Matinp."
    assert p.best_marriage_date == "02.11.1778"
    assert p.is_married
    assert p.birth_year == 1755


def test_person_without_marriage_is_not_married():
    assert not Person(name="Juho", birth_date="1758").is_married
    assert Person(name="Juho", spouse="Kaisa").is_married


def test_family_views(record_store):
    family = record_store.parse("KORPI 6", record_store.lookup_text("KORPI 6"))

    assert family.family_id == "KORPI 6"
    assert family.page_reference_string == "pages 105, 106"
    assert [p.name for p in family.all_parents] == ["Matti", "Brita", "Matti", "Anna"]
    assert [c.name for c in family.all_children] == ["Maria", "Kaarin", "Erik", "Juho", "Liisa"]
    assert [c.name for c in family.married_children] == ["Maria", "Erik"]
    assert family.total_children_died_infancy == 2
    assert family.is_valid
    assert family.validate_structure() == []


def test_single_page_reference_string():
    family = Family(family_id="KORVELA 2", page_references=["12"], couples=[_couple()])
    assert family.page_reference_string == "page 12"


def test_find_spouse_of_matches_display_name():
    family = Family(
        family_id="KORVELA 2",
        page_references=["12"],
        couples=[
            Couple(
                husband=Person(name="Erik", patronymic="Matinp."),
                wife=Person(name="Liisa", patronymic="Jaakont."),
            )
        ],
    )
    assert family.find_spouse_of(" erik matinp. ").name == "Liisa"
    assert family.find_spouse_of("Liisa").name == "Erik"
    assert family.find_spouse_of("Antti") is None


def test_validate_structure_reports_problems():
    family = Family(
        family_id="KORPI 1",
        page_references=[],
        couples=[
            Couple(
                husband=Person(name=""),
                wife=Person(name="Kaisa"),
                children=[Person(name="Matti"), Person(name="matti")],
            )
        ],
    )
    warnings = family.validate_structure()
    assert "Page references are required" in warnings
    assert "Couple 1: Husband name is required" in warnings
    assert "Couple 1: Duplicate child names found" in warnings


def test_from_dict_accepts_camel_case_and_single_couple_shorthand():
    family = Family.from_dict(
        {
            "familyId": "{hyyppä 12A}",
            "pageReferences": "33",
            "husband": {"name": "Antti", "birthDate": "1701", "asChild": "{HYYPPÄ 4}"},
            "wife": {"name": "Kaisa", "deathDate": "1760"},
            "marriageDate": "25",
            "children": [{"name": "Juho", "noteMarkers": "*)"}],
        }
    )
    assert family.family_id == "{hyyppä 12A}"
    assert family.page_references == ["33"]
    assert family.primary_couple.husband.birth_date == "1701"
    assert family.primary_couple.husband.as_child == "{HYYPPÄ 4}"
    assert family.primary_couple.marriage_date == "25"
    assert family.all_children[0].note_markers == ["*)"]


def test_from_dict_rejects_couple_without_wife():
    with pytest.raises(InvalidFamilyError) as exc:
        Family.from_dict({"family_id": "KORPI 1", "couples": [{"husband": {"name": "Matti"}}]})
    assert exc.value.family_id == "KORPI 1"


def test_from_dict_rejects_non_object():
    with pytest.raises(InvalidFamilyError):
        Family.from_dict(["not", "a", "record"], family_id="KORPI 1")


def test_to_dict_round_trip_keeps_fields(record_store):
    family = record_store.parse("KORVELA 2", record_store.lookup_text("KORVELA 2"))
    again = Family.from_dict(family.to_dict())
    assert again == family


def test_normalize_family_id():
    assert normalize_family_id("{korpi  5}") == "KORPI 5"
    assert normalize_family_id(" ISO-PEITSO III 2 ") == "ISO-PEITSO III 2"
    assert normalize_family_id("{}") is None
    assert normalize_family_id(None) is None
