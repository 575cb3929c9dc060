import os
from pathlib import Path

import yaml

PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_PATH = PROJECT_ROOT / "config" / "family_xref.yml"
CONFIG_ENV_VAR = "FAMILY_XREF_CONFIG"

DEFAULT_MAX_CONCURRENCY = 4


class XrefConfig:
    def __init__(self, data):
        self.paths = data.get("paths", {}) or {}
        self.logging = data.get("logging", {}) or {}
        self.resolver = data.get("resolver", {}) or {}
        self.debug = data.get("debug", False)

    @property
    def max_concurrency(self) -> int:
        value = self.resolver.get("max_concurrency", DEFAULT_MAX_CONCURRENCY)
        try:
            return max(1, int(value))
        except (TypeError, ValueError):
            return DEFAULT_MAX_CONCURRENCY

    def resolve_path(self, key: str, default: str) -> Path:
        """Return ``paths.<key>`` as an absolute path (relative to the project root)."""
        path = Path(self.paths.get(key) or default)
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        return path


def config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    return Path(override) if override else CONFIG_PATH


def load_config() -> 'XrefConfig':
    path = config_path()
    if not path.exists():
        # Installed outside the source tree: run on built-in defaults.
        return XrefConfig({})

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    return XrefConfig(data)

_config_cache = None

def get_config() -> 'XrefConfig':
    global _config_cache
    if _config_cache is None:
        _config_cache = load_config()
    return _config_cache


def reset_config() -> None:
    global _config_cache
    _config_cache = None
