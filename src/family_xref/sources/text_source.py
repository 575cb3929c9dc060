"""
Plain-text parish book split into family blocks.

A block starts at a header line such as ``KORPI 6``, ``ISO-PEITSO III 2``
or ``HYYPPÄ 12A`` and runs to the next header. ``lookup_text`` serves those
blocks by normalized family id; it never parses them.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from family_xref.identity.person_key import normalize_family_id
from family_xref.logging import get_logger

log = get_logger("text_source")

HEADER_RE = re.compile(r"^([A-ZÄÖÅ-]+(?:\s+[IVX]+)?\s+\d+[A-Z]?)\b")


class TextSource:
    def __init__(self, text: str):
        self._blocks: Dict[str, str] = {}
        self._order: List[str] = []
        self._split(text)

    @classmethod
    def from_file(cls, path: Path) -> "TextSource":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(path)
        return cls(path.read_text(encoding="utf-8"))

    def _split(self, text: str) -> None:
        current_id: Optional[str] = None
        current: List[str] = []

        def _flush() -> None:
            if current_id is None:
                return
            if current_id in self._blocks:
                log.warning("Duplicate family header %s; keeping the first block", current_id)
                return
            self._blocks[current_id] = "\n".join(current).strip()
            self._order.append(current_id)

        for line in text.splitlines():
            m = HEADER_RE.match(line.strip())
            if m:
                _flush()
                current_id = normalize_family_id(m.group(1))
                current = [line.rstrip()]
            elif current_id is not None:
                current.append(line.rstrip())
        _flush()

        log.debug("Split source text into %d family blocks", len(self._blocks))

    def lookup_text(self, family_id: str) -> Optional[str]:
        fid = normalize_family_id(family_id)
        if fid is None:
            return None
        return self._blocks.get(fid)

    def family_ids(self) -> List[str]:
        return list(self._order)

    def next_family_id(self, family_id: str) -> Optional[str]:
        """The id following ``family_id`` in document order (prefetch target)."""
        fid = normalize_family_id(family_id)
        if fid not in self._blocks:
            return None
        index = self._order.index(fid)
        if index + 1 < len(self._order):
            return self._order[index + 1]
        return None

    def __contains__(self, family_id: str) -> bool:
        return normalize_family_id(family_id) in self._blocks

    def __iter__(self) -> Iterator[str]:
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._blocks)
