"""
name_equivalence.py
Historical given-name variants (Liisa / Elisabet, Johan / Juho, ...).

Goals:
- Bidirectional, transitively closed mapping: after ``add`` any two names
  connected through a chain of insertions are decidable with one set lookup.
- Read-mostly: resolution runs work on an immutable ``snapshot()``; mutation
  (human-approved equivalences) goes through the lock-guarded index.
- Persisted as JSON (normalized name -> sorted equivalents), seeded with the
  built-in default pairs on first use, rewritten after every mutation.
"""

from __future__ import annotations

import json
import threading
import unicodedata
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Set, Tuple

from rapidfuzz.distance import Levenshtein

from family_xref.logging import get_logger

log = get_logger("name_equivalence")


DEFAULT_EQUIVALENCES: List[Tuple[str, str]] = [
    ("Liisa", "Elisabet"),
    ("Malin", "Magdalena"),
    ("Helena", "Leena"),
    ("Johan", "Juho"),
    ("Matti", "Matias"),
    ("Anna", "Annikki"),
    ("Kustaa", "Kustavi"),
    ("Brita", "Birgit"),
    ("Erik", "Erkki"),
    ("Henrik", "Heikki"),
    ("Margareta", "Marketta"),
    ("Kristina", "Kirstine"),
    ("Pietari", "Petrus"),
]

REGIONAL_PREFIXES = ("erik", "johan", "kust", "mati")
REGIONAL_SUFFIXES = ("nen", "ina", "ta", "tti")
REGIONAL_BOOST = 0.2

EQUIVALENT_SCORE = 0.95
DEFAULT_SUGGEST_THRESHOLD = 0.6


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def normalize_name(name: str) -> str:
    """Trim, lowercase and strip diacritics (``Märta`` -> ``marta``)."""
    decomposed = unicodedata.normalize("NFKD", name.strip().lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def is_regional_variant(a: str, b: str) -> bool:
    """Both normalized names share a known regional prefix or suffix."""
    if any(a.startswith(p) and b.startswith(p) for p in REGIONAL_PREFIXES):
        return True
    return any(a.endswith(s) and b.endswith(s) for s in REGIONAL_SUFFIXES)


def _string_similarity(a: str, b: str) -> float:
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - Levenshtein.distance(a, b) / longest


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class EquivalenceStatistics:
    total_groups: int
    total_names: int
    average_group_size: float
    largest_group_size: int

    def describe(self) -> str:
        return (
            "Name Equivalence Statistics:\n"
            f"- Total groups: {self.total_groups}\n"
            f"- Total names: {self.total_names}\n"
            f"- Average group size: {self.average_group_size:.1f}\n"
            f"- Largest group: {self.largest_group_size} names"
        )


def _groups_of(mapping: Mapping[str, Iterable[str]]) -> List[List[str]]:
    processed: Set[str] = set()
    groups: List[List[str]] = []
    for name in sorted(mapping):
        if name in processed:
            continue
        group = {name, *mapping[name]}
        processed.update(group)
        groups.append(sorted(group))
    return sorted(groups, key=lambda g: g[0])


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

class EquivalenceStore:
    """JSON file holding ``{normalized name: [equivalent names]}``."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Optional[Dict[str, Set[str]]]:
        """Return the stored mapping, or None when absent or unreadable."""
        if not self.path.exists():
            return None

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            log.warning("Could not read equivalence store %s: %s", self.path, exc)
            return None

        if not isinstance(raw, dict):
            log.warning("Equivalence store %s is not a JSON object; ignoring", self.path)
            return None

        return {
            str(k): {str(v) for v in values}
            for k, values in raw.items()
            if isinstance(values, list)
        }

    def save(self, mapping: Mapping[str, Iterable[str]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {k: sorted(v) for k, v in sorted(mapping.items())}
        self.path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


# ---------------------------------------------------------------------------
# Read-only snapshot
# ---------------------------------------------------------------------------

class NameEquivalenceSnapshot:
    """Immutable view handed to a single resolution run."""

    __slots__ = ("_mapping",)

    def __init__(self, mapping: Mapping[str, Iterable[str]]):
        self._mapping: Dict[str, FrozenSet[str]] = {k: frozenset(v) for k, v in mapping.items()}

    def are_equivalent(self, a: str, b: str) -> bool:
        na, nb = normalize_name(a), normalize_name(b)
        return na == nb or nb in self._mapping.get(na, frozenset())

    def equivalents_of(self, name: str) -> FrozenSet[str]:
        return self._mapping.get(normalize_name(name), frozenset())

    def __len__(self) -> int:
        return len(self._mapping)


# ---------------------------------------------------------------------------
# Mutable index
# ---------------------------------------------------------------------------

class NameEquivalenceIndex:
    """
    Lock-guarded equivalence index.

    With a ``store`` the mapping is loaded on construction (defaults seeded
    and written when the store is empty or unreadable) and rewritten after
    each mutation. Without one it lives in memory only.
    """

    def __init__(self, store: Optional[EquivalenceStore] = None, *, seed_defaults: bool = True):
        self._store = store
        self._lock = threading.RLock()
        self._equivalences: Dict[str, Set[str]] = {}

        loaded = store.load() if store is not None else None
        if loaded:
            self._equivalences = loaded
            log.debug("Loaded %d equivalence entries from %s", len(loaded), store.path)
        elif seed_defaults:
            self._load_defaults()
            self._save()

    # ---------- Internal helpers ----------

    def _load_defaults(self) -> None:
        log.info("Seeding %d default name equivalences", len(DEFAULT_EQUIVALENCES))
        for a, b in DEFAULT_EQUIVALENCES:
            self._link(normalize_name(a), normalize_name(b))

    def _save(self) -> None:
        if self._store is not None:
            self._store.save(self._equivalences)

    def _link(self, na: str, nb: str) -> None:
        self._equivalences.setdefault(na, set()).add(nb)
        self._equivalences.setdefault(nb, set()).add(na)
        self._close(na)

    def _close(self, name: str) -> None:
        """Give every name connected to ``name`` the full component as its set."""
        component: Set[str] = set()
        pending = [name]
        while pending:
            current = pending.pop()
            if current in component:
                continue
            component.add(current)
            pending.extend(self._equivalences.get(current, set()) - component)

        for member in component:
            self._equivalences[member] = component - {member}

    # ---------- Queries ----------

    def are_equivalent(self, a: str, b: str) -> bool:
        na, nb = normalize_name(a), normalize_name(b)
        if na == nb:
            return True
        with self._lock:
            return nb in self._equivalences.get(na, set())

    def equivalents_of(self, name: str) -> Set[str]:
        with self._lock:
            return set(self._equivalences.get(normalize_name(name), set()))

    def similarity(self, a: str, b: str) -> float:
        """
        Confidence in [0, 1] that two names are variants of each other.

        Only used to rank suggestions for a human reviewer.
        """
        na, nb = normalize_name(a), normalize_name(b)
        if na == nb:
            return 1.0
        if self.are_equivalent(na, nb):
            return EQUIVALENT_SCORE

        score = _string_similarity(na, nb)
        if is_regional_variant(na, nb):
            score = min(score + REGIONAL_BOOST, 1.0)
        return score

    def suggest(
        self,
        name: str,
        candidates: Iterable[str],
        threshold: float = DEFAULT_SUGGEST_THRESHOLD,
    ) -> List[Tuple[str, float]]:
        """Candidates not yet equivalent to ``name``, best first, at or above ``threshold``."""
        scored: List[Tuple[str, float]] = []
        seen: Set[str] = set()
        for candidate in candidates:
            key = normalize_name(candidate)
            if key in seen or key == normalize_name(name) or self.are_equivalent(name, candidate):
                continue
            seen.add(key)
            score = self.similarity(name, candidate)
            if score >= threshold:
                scored.append((candidate, score))
        return sorted(scored, key=lambda item: (-item[1], item[0]))

    @staticmethod
    def question_for(a: str, b: str) -> str:
        return f"Are '{a}' and '{b}' the same person? (Common Finnish name variations)"

    def groups(self) -> List[List[str]]:
        with self._lock:
            return _groups_of(self._equivalences)

    def statistics(self) -> EquivalenceStatistics:
        groups = self.groups()
        names = sum(len(g) for g in groups)
        return EquivalenceStatistics(
            total_groups=len(groups),
            total_names=names,
            average_group_size=(names / len(groups)) if groups else 0.0,
            largest_group_size=max((len(g) for g in groups), default=0),
        )

    def snapshot(self) -> NameEquivalenceSnapshot:
        with self._lock:
            return NameEquivalenceSnapshot(self._equivalences)

    def to_dict(self) -> Dict[str, List[str]]:
        with self._lock:
            return {k: sorted(v) for k, v in sorted(self._equivalences.items())}

    def __len__(self) -> int:
        with self._lock:
            return len(self._equivalences)

    # ---------- Mutation ----------

    def add(self, a: str, b: str) -> None:
        na, nb = normalize_name(a), normalize_name(b)
        if not na or not nb or na == nb:
            return

        log.info("Adding equivalence: %s <-> %s", na, nb)
        with self._lock:
            self._link(na, nb)
            self._save()

    def remove(self, a: str, b: str) -> bool:
        """Drop the direct link between two names. Returns False if there was none."""
        na, nb = normalize_name(a), normalize_name(b)
        with self._lock:
            if nb not in self._equivalences.get(na, set()):
                return False

            log.info("Removing equivalence: %s <-> %s", na, nb)
            for x, y in ((na, nb), (nb, na)):
                members = self._equivalences.get(x)
                if members is None:
                    continue
                members.discard(y)
                if not members:
                    del self._equivalences[x]
            self._save()
            return True

    def clear(self) -> None:
        log.warning("Clearing all name equivalences")
        with self._lock:
            self._equivalences.clear()
            if self._store is not None:
                self._store.clear()


def open_index(path: Optional[Path] = None) -> NameEquivalenceIndex:
    """Index backed by ``path`` or, by default, ``paths.equivalence_store`` from config."""
    from family_xref.config import get_config

    store_path = Path(path) if path else get_config().resolve_path("equivalence_store", "data/name_equivalences.json")
    return NameEquivalenceIndex(EquivalenceStore(store_path))
