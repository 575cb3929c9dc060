# tests/test_sources.py

import json

import pytest

from family_xref.core.exceptions import InvalidFamilyError, ParseFailure
from family_xref.sources.record_store import RecordStore
from family_xref.sources.text_source import TextSource


PARISH_TEXT = """\
Kylän talot 1720-1810

KORPI 5
Erik Matinp. 1698 - Kaarin Juhont. 1701
Lapset: Kaarin 12.01.1723, Matti 09.09.1727

KORPI 6
Matti Erikinp. 09.09.1727 - Brita Matint. 05.09.1731
Lapset: Maria 10.02.1752

ISO-PEITSO III 2
Elias Eliaanp. 1750 - Maria Matint. 10.02.1752

KORPI 6
Toinen kappale samalla numerolla
"""


# -----------------------------
# TextSource
# -----------------------------

def test_text_source_splits_on_headers():
    source = TextSource(PARISH_TEXT)
    assert source.family_ids() == ["KORPI 5", "KORPI 6", "ISO-PEITSO III 2"]
    assert len(source) == 3
    assert list(source) == source.family_ids()


def test_text_source_lookup_is_normalized():
    source = TextSource(PARISH_TEXT)
    block = source.lookup_text("{korpi  6}")
    assert block.splitlines()[0] == "KORPI 6"
    assert "Brita Matint." in block
    assert "{korpi 6}" in source
    assert source.lookup_text("KORPI 99") is None
    assert source.lookup_text("") is None


def test_text_source_keeps_first_duplicate_block():
    block = TextSource(PARISH_TEXT).lookup_text("KORPI 6")
    assert "Toinen kappale" not in block


def test_text_source_roman_numeral_header():
    block = TextSource(PARISH_TEXT).lookup_text("ISO-PEITSO III 2")
    assert "Elias Eliaanp." in block


def test_text_source_next_family_id():
    source = TextSource(PARISH_TEXT)
    assert source.next_family_id("korpi 5") == "KORPI 6"
    assert source.next_family_id("ISO-PEITSO III 2") is None
    assert source.next_family_id("NOWHERE 1") is None


def test_text_source_from_file(tmp_path):
    path = tmp_path / "book.txt"
    path.write_text(PARISH_TEXT, encoding="utf-8")
    assert "KORPI 5" in TextSource.from_file(path)

    with pytest.raises(FileNotFoundError):
        TextSource.from_file(tmp_path / "missing.txt")


# -----------------------------
# RecordStore
# -----------------------------

def test_record_store_lookup_embeds_family_id(record_store):
    data = json.loads(record_store.lookup_text("{korvela 2}"))
    assert data["family_id"] == "KORVELA 2"
    assert data["page_references"] == ["12"]
    assert record_store.lookup_text("SIKALA 5") is None


def test_record_store_parse_round_trip(record_store):
    family = record_store.parse("KORPI 5", record_store.lookup_text("KORPI 5"))
    assert family.family_id == "KORPI 5"
    assert [c.name for c in family.all_children] == ["Kaarin", "Matti"]


def test_record_store_malformed_text():
    with pytest.raises(ParseFailure) as exc:
        RecordStore({}).parse("KORPI 1", "KORPI 1\nMatti - Brita")
    assert exc.value.reason.startswith("malformed JSON")
    assert exc.value.family_id == "KORPI 1"


def test_record_store_invalid_family():
    with pytest.raises(InvalidFamilyError):
        RecordStore({}).parse("KORPI 1", json.dumps({"family_id": "KORPI 1", "couples": []}))


def test_record_store_skips_non_object_records():
    store = RecordStore({"KORPI 1": "text", "KORPI 2": {"couples": []}})
    assert "KORPI 1" not in store
    assert "korpi 2" in store
    assert len(store) == 1


def test_record_store_accepts_list_file(tmp_path):
    path = tmp_path / "records.json"
    path.write_text(
        json.dumps(
            [
                {"family_id": "KORPI 1", "page_references": ["1"], "couples": []},
                {"familyId": "KORPI 2", "page_references": ["2"], "couples": []},
            ]
        ),
        encoding="utf-8",
    )
    store = RecordStore.from_file(path)
    assert store.family_ids() == ["KORPI 1", "KORPI 2"]
    assert store.next_family_id("KORPI 1") == "KORPI 2"
    assert store.next_family_id("KORPI 2") is None


def test_record_store_rejects_scalar_file(tmp_path):
    path = tmp_path / "records.json"
    path.write_text("42", encoding="utf-8")
    with pytest.raises(ValueError):
        RecordStore.from_file(path)
