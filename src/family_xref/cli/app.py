from __future__ import annotations

import typer

from family_xref.cli.commands.cite import cite_command
from family_xref.cli.commands.names import names_app
from family_xref.cli.commands.resolve import resolve_command

app = typer.Typer(
    name="family-xref",
    help="Parish family record cross-referencing and citations",
    add_completion=False,
)

app.command("resolve")(resolve_command)
app.command("cite")(cite_command)
app.add_typer(names_app, name="names")


def main():
    app()


if __name__ == "__main__":
    main()
