"""
Cross-reference resolver.

Turns one nuclear ``Family`` into a ``FamilyNetwork`` by following the
references written into its records:

- each parent's birth-family reference     -> as_child
- each married child's adult-family reference -> as_parent
- that child's spouse, found in the adult family, and the spouse's own
  birth-family reference                   -> spouse_as_child

Every candidate family is fetched (``lookup_text``), parsed (``parse``) and
validated: the person must actually appear in it. Anything that fails along
the way is logged, counted as unresolved and leaves the network entry
absent. Only ``extract_family`` (the top-level record) propagates errors.

Independent references are resolved concurrently, bounded by a semaphore;
outcomes are merged into the network in input order.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Tuple, Union

from family_xref.config import get_config
from family_xref.core.exceptions import (
    FamilyXrefError,
    LookupFailure,
    ParseFailure,
    ValidationFailure,
)
from family_xref.entities import Family, Person
from family_xref.identity.matcher import EquivalenceLookup, find_same, same_identity
from family_xref.identity.person_key import PersonKey, normalize_family_id, normalize_text
from family_xref.logging import get_logger
from family_xref.network.family_network import FamilyNetwork
from family_xref.normalization.name_equivalence import NameEquivalenceIndex, NameEquivalenceSnapshot

log = get_logger("xref_resolver")

# Collaborators may be plain functions or coroutines.
LookupText = Callable[[str], Union[Optional[str], Awaitable[Optional[str]]]]
ParseRecord = Callable[[str, str], Union[Family, Awaitable[Family]]]

AS_CHILD = "as_child"
AS_PARENT = "as_parent"
SPOUSE_AS_CHILD = "spouse_as_child"


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


# -----------------------------
# Statistics
# -----------------------------

@dataclass(slots=True)
class ResolutionStatistics:
    resolved_by_id: int = 0
    resolved_by_fallback: int = 0
    unresolved: int = 0

    @property
    def total(self) -> int:
        return self.resolved_by_id + self.resolved_by_fallback + self.unresolved

    def summary(self) -> str:
        return (
            f"resolved by id: {self.resolved_by_id}, "
            f"resolved by birth date: {self.resolved_by_fallback}, "
            f"unresolved: {self.unresolved}"
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "resolved_by_id": self.resolved_by_id,
            "resolved_by_fallback": self.resolved_by_fallback,
            "unresolved": self.unresolved,
            "total": self.total,
        }


# -----------------------------
# Per-run state
# -----------------------------

@dataclass(slots=True)
class _Link:
    """One attempted resolution, merged into the network after fan-in."""

    table: str
    person: Person
    origin: str
    reference: str
    family: Optional[Family] = None
    by_fallback: bool = False
    counted: bool = True
    reason: Optional[str] = None


@dataclass(slots=True)
class _Run:
    equivalences: Optional[EquivalenceLookup]
    semaphore: asyncio.Semaphore
    memo: Dict[str, "asyncio.Task[Family]"] = field(default_factory=dict)


# -----------------------------
# Resolver
# -----------------------------

class CrossReferenceResolver:
    def __init__(
        self,
        lookup_text: LookupText,
        parse: ParseRecord,
        equivalences: Optional[Union[NameEquivalenceIndex, NameEquivalenceSnapshot]] = None,
        max_concurrency: Optional[int] = None,
    ):
        self.lookup_text = lookup_text
        self.parse = parse
        self.equivalences = equivalences
        self.max_concurrency = max(1, max_concurrency or get_config().max_concurrency)
        self.last_statistics = ResolutionStatistics()

    # ---------- Top level ----------

    async def extract_family(self, family_id: str) -> Family:
        """Fetch and parse the requested family; failures propagate."""
        fid = normalize_family_id(family_id)
        if not fid:
            raise LookupFailure(str(family_id))
        log.info("Extracting family %s", fid)
        return await self._fetch_and_parse(fid)

    async def build_network(self, family_id: str) -> FamilyNetwork:
        family = await self.extract_family(family_id)
        return await self.resolve(family)

    async def resolve(self, family: Family) -> FamilyNetwork:
        """Resolve every cross reference of ``family`` into a fresh network."""
        run = _Run(
            equivalences=self._snapshot(),
            semaphore=asyncio.Semaphore(self.max_concurrency),
        )
        stats = ResolutionStatistics()
        network = FamilyNetwork(family)
        origin = family.family_id

        # Parents of the nuclear family head it by definition.
        for parent in family.all_parents:
            network.store_as_parent(parent, family, origin)

        # A remarried parent is listed once per couple; resolve them once.
        # Same-named children pointing at different families are both kept.
        seen_parents: Set[Tuple[PersonKey, str]] = set()
        seen_children: Set[Tuple[PersonKey, str]] = set()
        jobs: List[Awaitable[List[_Link]]] = []
        for parent in family.all_parents:
            key = (PersonKey.of(parent, origin), normalize_family_id(parent.as_child) or "")
            if parent.as_child and key not in seen_parents:
                seen_parents.add(key)
                jobs.append(self._resolve_as_child(run, parent, origin))
        for child in family.married_children:
            key = (PersonKey.of(child, origin), normalize_family_id(child.as_parent) or "")
            if child.as_parent and key not in seen_children:
                seen_children.add(key)
                jobs.append(self._resolve_as_parent(run, child, origin))

        log.info("Resolving %d reference(s) for %s (max concurrency %d)", len(jobs), origin, self.max_concurrency)

        try:
            results = await asyncio.gather(*jobs)
        finally:
            for task in run.memo.values():
                if not task.done():
                    task.cancel()

        for links in results:
            for link in links:
                self._merge(network, link, stats)

        self.last_statistics = stats
        log.info("Resolution of %s finished: %s", origin, stats.summary())
        log.debug(network.debug_summary())
        return network

    # ---------- Merge ----------

    def _merge(self, network: FamilyNetwork, link: _Link, stats: ResolutionStatistics) -> None:
        if link.family is None:
            stats.unresolved += 1
            log.warning(
                "Unresolved %s reference %s for %s: %s",
                link.table, link.reference, link.person.display_name, link.reason,
            )
            return

        if link.counted and link.by_fallback:
            stats.resolved_by_fallback += 1
        elif link.counted:
            stats.resolved_by_id += 1

        if link.table == AS_CHILD:
            network.store_as_child(link.person, link.family, link.origin)
        elif link.table == AS_PARENT:
            network.store_as_parent(link.person, link.family, link.origin)
        else:
            network.store_spouse_as_child(link.person, link.family, link.origin)

        log.info("Resolved %s %s -> %s", link.table, link.person.display_name, link.family.family_id)

    # ---------- Reference kinds ----------

    async def _resolve_as_child(self, run: _Run, person: Person, origin: str) -> List[_Link]:
        link = await self._resolve_birth_family(run, person, origin, AS_CHILD)
        return [link]

    async def _resolve_as_parent(self, run: _Run, child: Person, origin: str) -> List[_Link]:
        reference = normalize_family_id(child.as_parent) or ""
        link = _Link(AS_PARENT, child, origin, reference)

        try:
            candidate = await self._load(run, reference)
            if not self._heads_family(child, candidate, run.equivalences):
                raise ValidationFailure(candidate.family_id, child.display_name)
        except ValidationFailure as exc:
            link.reason = str(exc)
            link.family, link.by_fallback = await self._fallback(run, child, reference)
            return [link]
        except FamilyXrefError as exc:
            link.reason = str(exc)
            return [link]

        link.family = candidate
        links = [link]

        spouse = self._find_spouse(child, candidate, run.equivalences)
        if spouse is None:
            log.debug("Spouse of %s not located in %s", child.display_name, candidate.family_id)
            return links

        # The adult family is the spouse's as_parent family too.
        links.append(_Link(AS_PARENT, spouse, candidate.family_id, candidate.family_id, family=candidate, counted=False))

        if spouse.as_child:
            links.append(await self._resolve_birth_family(run, spouse, candidate.family_id, SPOUSE_AS_CHILD))

        return links

    async def _resolve_birth_family(self, run: _Run, person: Person, origin: str, table: str) -> _Link:
        reference = normalize_family_id(person.as_child) or ""
        link = _Link(table, person, origin, reference)

        try:
            candidate = await self._load(run, reference)
            if find_same(person, candidate.all_children, run.equivalences) is None:
                raise ValidationFailure(candidate.family_id, person.display_name)
        except ValidationFailure as exc:
            link.reason = str(exc)
            link.family, link.by_fallback = await self._fallback(run, person, reference)
            return link
        except FamilyXrefError as exc:
            link.reason = str(exc)
            return link

        link.family = candidate
        return link

    # ---------- Validation helpers ----------

    @staticmethod
    def _heads_family(person: Person, family: Family, equivalences: Optional[EquivalenceLookup]) -> bool:
        return any(
            same_identity(person, couple.husband, equivalences) or same_identity(person, couple.wife, equivalences)
            for couple in family.couples
        )

    @staticmethod
    def _find_spouse(child: Person, family: Family, equivalences: Optional[EquivalenceLookup]) -> Optional[Person]:
        """Locate the child's spouse in the adult family (name or name + patronymic)."""
        if child.spouse:
            wanted = normalize_text(child.spouse)
            for couple in family.couples:
                for candidate in (couple.husband, couple.wife):
                    if wanted in (normalize_text(candidate.name), normalize_text(candidate.display_name)):
                        return candidate
            return None

        # No spouse name recorded: take the partner of the couple the child heads.
        for couple in family.couples:
            if same_identity(child, couple.husband, equivalences):
                return couple.wife
            if same_identity(child, couple.wife, equivalences):
                return couple.husband
        return None

    async def _fallback(self, run: _Run, person: Person, reference: str) -> Tuple[Optional[Family], bool]:
        found = await self._find_by_birth_date(run, person, reference)
        return found, found is not None

    async def _find_by_birth_date(self, run: _Run, person: Person, reference: str) -> Optional[Family]:
        """
        Extension point: search other records by birth date when a direct
        reference does not validate. Not implemented; always None.
        """
        return None

    # ---------- Fetch / parse ----------

    def _snapshot(self) -> Optional[EquivalenceLookup]:
        if isinstance(self.equivalences, NameEquivalenceIndex):
            return self.equivalences.snapshot()
        return self.equivalences

    async def _load(self, run: _Run, family_id: str) -> Family:
        """Fetch + parse once per id per run; concurrent callers share the task."""
        if not family_id:
            raise LookupFailure(family_id)

        task = run.memo.get(family_id)
        if task is None:
            task = asyncio.ensure_future(self._bounded_load(run, family_id))
            run.memo[family_id] = task
        return await task

    async def _bounded_load(self, run: _Run, family_id: str) -> Family:
        async with run.semaphore:
            log.debug("Fetching %s", family_id)
            return await self._fetch_and_parse(family_id)

    async def _fetch_and_parse(self, family_id: str) -> Family:
        try:
            text = await _maybe_await(self.lookup_text(family_id))
        except Exception as exc:
            log.error("Text lookup for %s failed: %s", family_id, exc)
            raise LookupFailure(family_id) from exc

        if not text:
            raise LookupFailure(family_id)

        try:
            family = await _maybe_await(self.parse(family_id, text))
        except ParseFailure:
            raise
        except Exception as exc:
            raise ParseFailure(family_id, str(exc)) from exc

        if not isinstance(family, Family):
            raise ParseFailure(family_id, f"parser returned {type(family).__name__}, expected Family")
        return family
