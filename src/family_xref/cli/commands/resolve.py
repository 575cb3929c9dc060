from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from family_xref.cli.utils import load_network, network_rows, write_json

console = Console()


def resolve_command(
    family_id: str = typer.Argument(..., help="Family id, e.g. 'KORPI 6'"),
    records: Path = typer.Option(
        ...,
        "--records",
        "-r",
        exists=True,
        readable=True,
        help="JSON file of extracted family records",
    ),
    names: Optional[Path] = typer.Option(
        None,
        "--names",
        help="Name equivalence store (defaults to paths.equivalence_store)",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the network as JSON",
    ),
    out: Optional[Path] = typer.Option(
        None,
        "--out",
        "-o",
        help="Write the JSON network to this file instead of stdout",
    ),
    pretty: bool = typer.Option(
        True,
        "--pretty/--compact",
        help="Indent JSON output",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log each resolution step to stderr",
    ),
):
    """
    Resolve the cross references of one family and show the linked families.
    """
    network, resolver, _ = load_network(records, family_id, names=names, verbose=verbose)
    stats = resolver.last_statistics

    if as_json or out:
        data = network.to_dict()
        data["statistics"] = stats.to_dict()
        write_json(data, out=out, pretty=pretty)
        if out:
            console.print(f"Network written to {out}")
        return

    table = Table(title=f"Family network: {network.main_family_id}")
    table.add_column("Link", style="bold")
    table.add_column("Person key")
    table.add_column("Family")

    for link, key, fid in network_rows(network):
        table.add_row(link, key, fid)

    console.print(table)
    console.print(
        f"Linked families: {network.total_resolved}  "
        f"(resolved by id: {stats.resolved_by_id}, "
        f"by birth date: {stats.resolved_by_fallback}, "
        f"unresolved: {stats.unresolved})"
    )
