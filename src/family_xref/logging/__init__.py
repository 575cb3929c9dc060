"""
Logging package for ``family_xref``.

Modules call ``get_logger("<module>")``; handlers are set up once from
``config/family_xref.yml``.
"""

from .logger import LogSettings, get_logger, list_active_loggers, set_console_level

__all__ = [
    "LogSettings",
    "get_logger",
    "list_active_loggers",
    "set_console_level",
]
