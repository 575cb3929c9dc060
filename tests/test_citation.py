# tests/test_citation.py

from __future__ import annotations

import asyncio

import pytest

from family_xref.citation.generator import (
    person_from_name,
    render_as_child_family,
    render_family_set,
    render_main_family,
    render_spouse_as_child_family,
)
from family_xref.entities import Couple, Family, Person
from family_xref.network.family_network import FamilyNetwork
from family_xref.resolver.xref_resolver import CrossReferenceResolver


KORPI_6_CITATION = """\
Information on pages 105, 106 includes:
Matti Erikinp., 9 September 1727 - 22 August 1812
Brita Matint., 5 September 1731 - 11 July 1769
m. 14 October 1750
Children:
Maria, b. 10 February 1752, m. Elias Eliaanp. 1773
Kaarin, b. 1 February 1753, d. 15 March 1753
Erik, b. 17 November 1755, m. Liisa Jaakont. 1778
Juho, b. 3 March 1758 *)
Additional spouse:
Anna Juhont., widow of Pietari Korven, b. abt 1740
m. 20 May 1770
Children:
Liisa, b. 2 April 1772
Note:
Talo jaettiin 1780.
*) Muutti Kokkolaan.
Children died as infants: 2
"""


@pytest.fixture
def network(record_store, equivalences):
    resolver = CrossReferenceResolver(record_store.lookup_text, record_store.parse, equivalences)
    return asyncio.run(resolver.build_network("KORPI 6"))


def _family(record_store, fid):
    return record_store.parse(fid, record_store.lookup_text(fid))


# -----------------------------
# Main family
# -----------------------------

def test_main_family_citation(record_store):
    family = _family(record_store, "KORPI 6")
    assert render_main_family(family) == KORPI_6_CITATION


def test_rendering_is_idempotent(network):
    family = network.main_family
    first = render_main_family(family, network=network)
    assert render_main_family(family, network=network) == first
    assert first == KORPI_6_CITATION


def test_main_family_marks_target_parent(record_store):
    family = _family(record_store, "KORPI 6")
    text = render_main_family(family, target=family.primary_couple.wife)
    assert "→ Brita Matint., 5 September 1731 - 11 July 1769" in text.splitlines()


def test_main_family_enhances_target_child(network):
    erik = network.main_family.married_children[1]
    text = render_main_family(network.main_family, erik, network)
    assert "→ Erik, 17 November 1755 - 3 April 1810, m. Liisa Jaakont. 2 November 1778" in text.splitlines()
    assert text.endswith("Erik's marriage date and death date found on page 12\n")


def test_main_family_target_child_without_linked_facts_is_plain(record_store):
    family = _family(record_store, "KORPI 6")
    maria = family.married_children[0]
    text = render_main_family(family, maria)
    assert "Maria, b. 10 February 1752, m. Elias Eliaanp. 1773" in text.splitlines()
    assert "→" not in text


def test_unresolved_birth_family_leaves_citation_plain(network):
    # Brita's {SIKALA 5} is not in the record store
    brita = network.main_family.primary_couple.wife
    assert network.as_child_family(brita) is None

    text = render_main_family(network.main_family, brita, network)
    assert "→ Brita Matint., 5 September 1731 - 11 July 1769" in text.splitlines()
    assert "Additional Information:" not in text


def test_two_digit_couple_marriage_year_uses_husband_birth(record_store):
    text = render_main_family(_family(record_store, "KORPI 5"))
    lines = text.splitlines()
    assert lines[:4] == [
        "Information on page 104 includes:",
        "Erik Matinp., b. 1698",
        "Kaarin Juhont., b. 1701",
        "m. 1720",
    ]


# -----------------------------
# As child
# -----------------------------

def test_as_child_marks_row_and_adds_linked_facts(network):
    erik = network.main_family.married_children[1]
    text = render_as_child_family(erik, network.main_family, network)
    lines = text.splitlines()

    assert "→ Erik, 17 November 1755 - 3 April 1810, m. Liisa Jaakont. 2 November 1778" in lines
    assert lines[-2:] == [
        "Additional Information:",
        "Erik's marriage date and death date found on page 12",
    ]
    assert "WARNING" not in text


def test_parent_as_child_in_birth_family(network):
    matti = network.main_family.primary_couple.husband
    birth_family = network.as_child_family(matti)
    text = render_as_child_family(matti, birth_family, network)
    lines = text.splitlines()

    assert lines[0] == "Information on page 104 includes:"
    assert lines[5] == "Kaarin, b. 12 January 1723"
    assert lines[6] == "→ Matti, 9 September 1727 - 22 August 1812, m. Brita Matint. 14 October 1750"
    assert lines[-1] == "Matti's marriage date and death date found on pages 105, 106"


def test_as_child_without_network_marks_plain_row(record_store):
    family = _family(record_store, "KORPI 5")
    text = render_as_child_family(Person(name="Kaarin", birth_date="12.01.1723"), family)
    assert "→ Kaarin, b. 12 January 1723" in text.splitlines()
    assert "Additional Information:" not in text


def test_birth_date_beats_name_when_locating_target(record_store):
    # KORPI 5 lists Kaarin as both mother and child; only the child row is marked
    family = _family(record_store, "KORPI 5")
    text = render_as_child_family(Person(name="Kaarin", birth_date="12.01.1723"), family)
    marked = [line for line in text.splitlines() if line.startswith("→")]
    assert marked == ["→ Kaarin, b. 12 January 1723"]


def test_unmatched_target_gets_warning(record_store):
    family = _family(record_store, "KORPI 5")
    text = render_as_child_family(Person(name="Antti", birth_date="1760"), family)
    assert text.endswith(
        "WARNING: Could not match target person 'Antti' (birth: 1760) in this family.\n"
    )
    assert "→" not in text


def test_warning_without_birth_date(record_store):
    family = _family(record_store, "KORPI 5")
    text = render_as_child_family(Person(name="Antti"), family)
    assert "(birth: unknown)" in text


def test_spouse_as_child_citation(network):
    spouse_family = network.spouse_as_child_family(person_from_name("Liisa Jaakont."), "KORVELA 2")
    text = render_spouse_as_child_family("Liisa Jaakont.", spouse_family, network)
    lines = text.splitlines()

    assert lines[0] == "Information on page 88 includes:"
    assert "→ Liisa, b. 1757, m. Erik Matinp. 2 November 1778" in lines
    assert lines[-1] == "Liisa's marriage date found on page 12"


# -----------------------------
# Helpers and family set
# -----------------------------

def test_person_from_name():
    p = person_from_name("Antti Antinp.")
    assert (p.name, p.patronymic) == ("Antti", "Antinp.")

    q = person_from_name(" Liisa ")
    assert (q.name, q.patronymic) == ("Liisa", None)


def test_family_set_titles(network):
    titles = [title for title, _ in render_family_set(network)]
    assert titles == [
        "KORPI 6",
        "Matti Erikinp. as child (KORPI 5)",
        "Maria as parent (ISO-PEITSO III 2)",
        "Erik as parent (KORVELA 2)",
        "Liisa Jaakont. as child (PIHLAJA 3)",
    ]


def test_family_set_texts_end_with_newline(network):
    for _, text in render_family_set(network):
        assert text.endswith("\n")
        assert text.startswith("Information on ")


# -----------------------------
# Hand-built families
# -----------------------------

def test_linked_marriage_date_is_new_when_nuclear_row_has_none():
    maria = Person(name="Maria", birth_date="10.02.1750", spouse="Antti Antinp.", as_parent="{HYYPPÄ 3}")
    main = Family(
        "KORPI 1",
        ["100"],
        [Couple(Person(name="Juho"), Person(name="Anna"), children=[maria])],
    )
    adult = Family(
        "HYYPPÄ 3",
        ["200"],
        [
            Couple(
                Person(name="Antti", patronymic="Antinp.", birth_date="1745"),
                Person(name="Maria", birth_date="10.02.1750"),
                marriage_date="1773",
            )
        ],
    )
    network = FamilyNetwork(main)
    network.store_as_parent(maria, adult)

    text = render_as_child_family(maria, main, network)
    assert "→ Maria, b. 10 February 1750, m. Antti Antinp. 1773" in text.splitlines()
    assert text.endswith("Maria's marriage date found on page 200\n")


def test_as_parent_citation_marks_the_parent_not_a_same_named_son():
    matti = Person(name="Matti", birth_date="01.01.1750", spouse="Kaisa", marriage_date="75", as_parent="{KORVELA 2}")
    main = Family(
        "KORPI 6",
        ["100"],
        [Couple(Person(name="Erik"), Person(name="Kaarin"), children=[matti])],
    )
    adult = Family(
        "KORVELA 2",
        ["200"],
        [
            Couple(
                Person(name="Matti", birth_date="01.01.1750", death_date="03.03.1800"),
                Person(name="Kaisa"),
                full_marriage_date="14.10.1775",
                children=[Person(name="Matti", birth_date="02.02.1780")],
            )
        ],
    )
    network = FamilyNetwork(main)
    network.store_as_parent(matti, adult)

    citations = dict(render_family_set(network))
    text = citations["Matti as parent (KORVELA 2)"]
    lines = text.splitlines()

    assert "→ Matti, 1 January 1750 - 3 March 1800" in lines
    assert "Matti, b. 2 February 1780" in lines
    assert [line for line in lines if line.startswith("→")] == ["→ Matti, 1 January 1750 - 3 March 1800"]
    assert "Additional Information:" not in text
