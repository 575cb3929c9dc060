from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from family_xref.normalization.name_equivalence import open_index

console = Console()

names_app = typer.Typer(
    help="Inspect and edit the name equivalence store",
    add_completion=False,
)

STORE_HELP = "Name equivalence store (defaults to paths.equivalence_store)"


@names_app.command("list")
def list_command(
    store: Optional[Path] = typer.Option(None, "--store", help=STORE_HELP),
):
    """
    Show every equivalence group.
    """
    index = open_index(store)

    table = Table(title="Name equivalences")
    table.add_column("#", justify="right")
    table.add_column("Names")
    for number, group in enumerate(index.groups(), start=1):
        table.add_row(str(number), ", ".join(group))

    console.print(table)
    console.print(index.statistics().describe())


@names_app.command("add")
def add_command(
    first: str = typer.Argument(...),
    second: str = typer.Argument(...),
    store: Optional[Path] = typer.Option(None, "--store", help=STORE_HELP),
):
    """
    Record that two given names are variants of each other.
    """
    index = open_index(store)
    index.add(first, second)
    console.print(f"Added: {first} = {second}")
    console.print(f"Now equivalent to {first}: {', '.join(sorted(index.equivalents_of(first)))}")


@names_app.command("remove")
def remove_command(
    first: str = typer.Argument(...),
    second: str = typer.Argument(...),
    store: Optional[Path] = typer.Option(None, "--store", help=STORE_HELP),
):
    """
    Remove the direct equivalence between two names.
    """
    index = open_index(store)
    if not index.remove(first, second):
        console.print(f"[yellow]{first} and {second} are not directly equivalent[/yellow]")
        raise typer.Exit(code=1)
    console.print(f"Removed: {first} = {second}")


@names_app.command("suggest")
def suggest_command(
    name: str = typer.Argument(...),
    candidates: List[str] = typer.Argument(...),
    threshold: float = typer.Option(0.6, "--threshold", help="Minimum similarity (0-1)"),
    store: Optional[Path] = typer.Option(None, "--store", help=STORE_HELP),
):
    """
    Rank candidate names by similarity to NAME for review.
    """
    index = open_index(store)
    suggestions = index.suggest(name, candidates, threshold=threshold)
    if not suggestions:
        console.print(f"No candidates at or above {threshold:.2f}")
        return

    table = Table(title=f"Suggestions for {name}")
    table.add_column("Candidate", style="bold")
    table.add_column("Similarity", justify="right")
    table.add_column("Question")
    for candidate, score in suggestions:
        table.add_row(candidate, f"{score:.2f}", index.question_for(name, candidate))

    console.print(table)
