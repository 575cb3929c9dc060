from __future__ import annotations

import asyncio
import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.console import Console

from family_xref.core.exceptions import FamilyXrefError
from family_xref.entities import Family, Person
from family_xref.identity.person_key import normalize_text
from family_xref.logging import set_console_level
from family_xref.network.family_network import FamilyNetwork
from family_xref.normalization.name_equivalence import open_index
from family_xref.resolver.xref_resolver import CrossReferenceResolver
from family_xref.sources.record_store import RecordStore

err_console = Console(stderr=True)


def load_network(
    records: Path,
    family_id: str,
    *,
    names: Optional[Path] = None,
    verbose: bool = False,
):
    """
    Load the record file, build the network for ``family_id``.

    Returns ``(network, resolver, index)``; exits with code 1 when the
    requested family itself cannot be extracted.
    """
    if verbose:
        set_console_level(logging.INFO)

    t0 = time.perf_counter()

    store = RecordStore.from_file(records)
    index = open_index(names)
    resolver = CrossReferenceResolver(store.lookup_text, store.parse, equivalences=index)

    try:
        network = asyncio.run(resolver.build_network(family_id))
    except FamilyXrefError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1)

    elapsed = time.perf_counter() - t0
    if verbose:
        err_console.log(f"Resolved {network.main_family_id} in {elapsed:.2f}s")

    return network, resolver, index


def find_person(family: Family, name: str) -> Optional[Person]:
    """Parent or child whose name or display name matches ``name``."""
    wanted = normalize_text(name)
    for person in family.all_children + family.all_parents:
        if wanted in (normalize_text(person.name), normalize_text(person.display_name)):
            return person
    return None


def network_rows(network: FamilyNetwork):
    """(link, key, family id) rows for display, table by table."""
    data = network.to_dict()
    for table in ("as_child", "as_parent", "spouse_as_child"):
        for key, fid in data[table].items():
            yield table, key, fid


def write_json(
    data: Dict[str, Any],
    *,
    out: Path | None,
    pretty: bool,
):
    """
    Write JSON to stdout or file.
    """
    if pretty:
        payload = json.dumps(data, indent=2, ensure_ascii=False)
    else:
        payload = json.dumps(data, separators=(",", ":"), ensure_ascii=False)

    if out:
        out.write_text(payload, encoding="utf-8")
    else:
        print(payload)
