"""
Logging setup for family_xref.

Every module asks ``get_logger("<module>")`` for a child of the
``family_xref`` logger. The parent owns two handlers:

* a master file in the configured log directory (``logs/family_xref.log``),
  rotated when ``logging.rotate`` is set;
* a stderr console handler. It shows warnings only (unresolved references,
  unreadable stores) so that stdout stays clean for citation text and
  JSON. ``set_console_level`` lowers it, e.g. for ``resolve --verbose``.

With ``logging.module_files`` each module additionally writes its own
``logs/family_xref_<module>.log``.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from logging import Logger
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, List, Optional

from family_xref.config import PROJECT_ROOT, XrefConfig, get_config

BASE_LOGGER_NAME = "family_xref"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROTATE_MAX_BYTES = 5 * 1024 * 1024
ROTATE_BACKUPS = 5


@dataclass(slots=True)
class LogSettings:
    level: int
    console_level: int
    log_dir: Path
    master_file: str
    rotate: bool
    module_files: bool

    @classmethod
    def from_config(cls, cfg: XrefConfig) -> "LogSettings":
        level_name = str(cfg.logging.get("level", "INFO")).upper()
        level = getattr(logging, level_name, logging.INFO)
        if cfg.debug:
            level = logging.DEBUG

        log_dir = Path(cfg.logging.get("dir") or cfg.paths.get("logs_dir") or "logs")
        if not log_dir.is_absolute():
            log_dir = PROJECT_ROOT / log_dir

        return cls(
            level=level,
            console_level=logging.DEBUG if cfg.debug else logging.WARNING,
            log_dir=log_dir,
            master_file=cfg.logging.get("file", "family_xref.log"),
            rotate=bool(cfg.logging.get("rotate", False)),
            module_files=bool(cfg.logging.get("module_files", False)),
        )


_settings: Optional[LogSettings] = None
_console: Optional[logging.Handler] = None
_loggers: Dict[str, Logger] = {}


def _formatter() -> logging.Formatter:
    return logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)


def _file_handler(path: Path, settings: LogSettings) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    if settings.rotate:
        handler: logging.Handler = RotatingFileHandler(
            path, maxBytes=ROTATE_MAX_BYTES, backupCount=ROTATE_BACKUPS, encoding="utf-8"
        )
    else:
        handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(settings.level)
    handler.setFormatter(_formatter())
    return handler


def _base() -> Logger:
    """The ``family_xref`` logger, configured on first use."""
    global _settings, _console

    base = logging.getLogger(BASE_LOGGER_NAME)
    if _settings is not None:
        return base

    _settings = LogSettings.from_config(get_config())
    base.setLevel(logging.DEBUG)
    base.propagate = False
    base.addHandler(_file_handler(_settings.log_dir / _settings.master_file, _settings))

    _console = logging.StreamHandler(sys.stderr)
    _console.setLevel(_settings.console_level)
    _console.setFormatter(_formatter())
    base.addHandler(_console)
    return base


def _qualified(name: str) -> str:
    if name == BASE_LOGGER_NAME or name.startswith(BASE_LOGGER_NAME + "."):
        return name
    return f"{BASE_LOGGER_NAME}.{name}"


def get_logger(name: Optional[str] = None) -> Logger:
    """Logger ``family_xref.<name>`` sharing the package handlers."""
    base = _base()
    qualified = _qualified(name or BASE_LOGGER_NAME)
    if qualified == base.name:
        _loggers[qualified] = base
        return base

    logger = logging.getLogger(qualified)
    if qualified not in _loggers and _settings.module_files:
        filename = qualified.replace(".", "_") + ".log"
        logger.addHandler(_file_handler(_settings.log_dir / filename, _settings))

    _loggers[qualified] = logger
    return logger


def set_console_level(level: int) -> None:
    """Change what reaches stderr without touching the log files."""
    _base()
    _console.setLevel(level)


def list_active_loggers() -> List[str]:
    """Names handed out so far (used when checking configuration in tests)."""
    return sorted(_loggers)
