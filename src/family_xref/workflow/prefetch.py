"""
Background resolution of the next anticipated family.

While the current family is being reviewed, ``Prefetcher`` builds the
network for the one expected next in its own task, with its own resolver
run and its own ``FamilyNetwork``. Nothing is shared with the foreground
resolution except the read-only equivalence snapshot each run takes.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

from family_xref.core.exceptions import FamilyXrefError
from family_xref.identity.person_key import normalize_family_id
from family_xref.logging import get_logger
from family_xref.network.family_network import FamilyNetwork
from family_xref.resolver.xref_resolver import CrossReferenceResolver

log = get_logger("prefetch")


class Prefetcher:
    def __init__(self, resolver_factory: Callable[[], CrossReferenceResolver]):
        self._resolver_factory = resolver_factory
        self._task: Optional["asyncio.Task[Optional[FamilyNetwork]]"] = None
        self._family_id: Optional[str] = None

    @property
    def pending_id(self) -> Optional[str]:
        return self._family_id

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def schedule(self, family_id: str) -> "asyncio.Task[Optional[FamilyNetwork]]":
        """Start prefetching ``family_id``; a previously scheduled run is cancelled."""
        fid = normalize_family_id(family_id) or family_id
        if self._task is not None and self._family_id == fid:
            return self._task

        self.cancel()
        self._family_id = fid
        self._task = asyncio.get_running_loop().create_task(self._run(fid))
        log.info("Prefetch scheduled for %s", fid)
        return self._task

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            log.info("Cancelling prefetch of %s", self._family_id)
            self._task.cancel()

    async def result(self, family_id: Optional[str] = None) -> Optional[FamilyNetwork]:
        """
        Wait for the prefetched network.

        None when nothing is scheduled, when ``family_id`` names a different
        family, or when the run was cancelled or failed.
        """
        task = self._task
        if task is None:
            return None
        if family_id is not None and normalize_family_id(family_id) != self._family_id:
            return None

        # asyncio.wait does not raise when the task itself was cancelled.
        await asyncio.wait({task})
        if task.cancelled():
            return None
        return task.result()

    async def _run(self, family_id: str) -> Optional[FamilyNetwork]:
        resolver = self._resolver_factory()
        try:
            network = await resolver.build_network(family_id)
        except FamilyXrefError as exc:
            log.warning("Prefetch of %s failed: %s", family_id, exc)
            return None

        log.info("Prefetch of %s ready: %s", family_id, resolver.last_statistics.summary())
        return network
