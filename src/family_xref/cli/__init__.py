"""
CLI package for family_xref.

Provides the Typer application entrypoint and shared CLI utilities.
"""

from family_xref.cli.app import app, main

__all__ = [
    "app",
    "main",
]
