"""
JSON file of pre-extracted family records.

Layout::

    {
      "KORPI 6": {"page_references": ["105", "106"], "couples": [...], ...},
      "KORVELA 2": {...}
    }

It plays both collaborator roles of the resolver: ``lookup_text`` hands out
a record serialised as JSON text and ``parse`` decodes such text back into
a ``Family``. This is how the CLI and the tests run without the language
model service that normally turns raw parish text into records.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from family_xref.core.exceptions import InvalidFamilyError, ParseFailure
from family_xref.entities import Family
from family_xref.identity.person_key import normalize_family_id
from family_xref.logging import get_logger

log = get_logger("record_store")


class RecordStore:
    def __init__(self, records: Dict[str, Any]):
        self._records: Dict[str, Dict[str, Any]] = {}
        for key, record in records.items():
            fid = normalize_family_id(key)
            if fid is None or not isinstance(record, dict):
                log.warning("Skipping record with key %r", key)
                continue
            self._records[fid] = record

    @classmethod
    def from_file(cls, path: Path) -> "RecordStore":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(path)

        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        # Also accept a list of records carrying their own family_id.
        if isinstance(data, list):
            data = {
                str(r.get("family_id") or r.get("familyId")): r
                for r in data
                if isinstance(r, dict)
            }
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a JSON object of records")

        log.info("Loaded %d family records from %s", len(data), path)
        return cls(data)

    # ---------- Collaborator interface ----------

    def lookup_text(self, family_id: str) -> Optional[str]:
        fid = normalize_family_id(family_id)
        record = self._records.get(fid) if fid else None
        if record is None:
            return None
        return json.dumps({"family_id": fid, **record}, ensure_ascii=False)

    def parse(self, family_id: str, text: str) -> Family:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseFailure(family_id, f"malformed JSON: {exc.msg}") from exc

        try:
            return Family.from_dict(data, family_id=family_id)
        except InvalidFamilyError:
            raise
        except (TypeError, ValueError, AttributeError) as exc:
            raise ParseFailure(family_id, str(exc)) from exc

    # ---------- Inspection ----------

    def family_ids(self) -> List[str]:
        return list(self._records)

    def next_family_id(self, family_id: str) -> Optional[str]:
        fid = normalize_family_id(family_id)
        ids = self.family_ids()
        if fid not in ids:
            return None
        index = ids.index(fid)
        return ids[index + 1] if index + 1 < len(ids) else None

    def __contains__(self, family_id: str) -> bool:
        return normalize_family_id(family_id) in self._records

    def __len__(self) -> int:
        return len(self._records)
