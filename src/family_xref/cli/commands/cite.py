from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from family_xref.citation.generator import (
    render_as_child_family,
    render_family_set,
    render_main_family,
)
from family_xref.cli.utils import find_person, load_network

console = Console()
err_console = Console(stderr=True)


def cite_command(
    family_id: str = typer.Argument(..., help="Family id, e.g. 'KORPI 6'"),
    records: Path = typer.Option(
        ...,
        "--records",
        "-r",
        exists=True,
        readable=True,
        help="JSON file of extracted family records",
    ),
    target: Optional[str] = typer.Option(
        None,
        "--target",
        "-t",
        help="Mark and enhance this person (name or name + patronymic)",
    ),
    as_child: bool = typer.Option(
        False,
        "--as-child",
        help="Cite the target's birth family instead of the main family",
    ),
    all_citations: bool = typer.Option(
        False,
        "--all",
        help="Print every citation of the resolved network",
    ),
    names: Optional[Path] = typer.Option(
        None,
        "--names",
        help="Name equivalence store (defaults to paths.equivalence_store)",
    ),
):
    """
    Print citation text for a family, optionally focused on one person.
    """
    network, _, index = load_network(records, family_id, names=names)
    family = network.main_family
    equivalences = index.snapshot()

    if all_citations:
        for title, text in render_family_set(network, equivalences):
            console.rule(title)
            typer.echo(text)
        return

    if target is None:
        if as_child:
            err_console.print("[red]Error:[/red] --as-child needs --target")
            raise typer.Exit(code=2)
        typer.echo(render_main_family(family, network=network, equivalences=equivalences))
        return

    person = find_person(family, target)
    if person is None:
        err_console.print(f"[red]Error:[/red] '{target}' is not in {family.family_id}")
        raise typer.Exit(code=1)

    if not as_child:
        is_parent = any(parent is person for parent in family.all_parents)
        typer.echo(render_main_family(family, person, network, equivalences, target_is_parent=is_parent))
        return

    # Children of the main family were born into it.
    if any(child is person for child in family.all_children):
        birth_family = family
    else:
        birth_family = network.as_child_family(person)

    if birth_family is None:
        err_console.print(f"[yellow]No resolved birth family for {person.display_name}[/yellow]")
        raise typer.Exit(code=1)

    typer.echo(render_as_child_family(person, birth_family, network, equivalences))
