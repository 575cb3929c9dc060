"""
CLI command modules for family_xref.

Each command module defines a single Typer-compatible command function,
except ``names`` which is a small Typer sub-application.
"""

from family_xref.cli.commands.cite import cite_command
from family_xref.cli.commands.names import names_app
from family_xref.cli.commands.resolve import resolve_command

__all__ = [
    "cite_command",
    "names_app",
    "resolve_command",
]
