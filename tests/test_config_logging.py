# tests/test_config_logging.py

import logging

from family_xref import config
from family_xref.logging import LogSettings, get_logger, list_active_loggers
from family_xref.resolver.xref_resolver import CrossReferenceResolver


def _write_config(tmp_path, text):
    path = tmp_path / "family_xref.yml"
    path.write_text(text, encoding="utf-8")
    return path


def test_config_override_from_env(tmp_path, monkeypatch):
    path = _write_config(tmp_path, "resolver:\n  max_concurrency: 2\npaths:\n  equivalence_store: names.json\n")
    monkeypatch.setenv(config.CONFIG_ENV_VAR, str(path))
    config.reset_config()

    cfg = config.get_config()
    assert cfg.max_concurrency == 2
    assert cfg.resolve_path("equivalence_store", "x.json") == config.PROJECT_ROOT / "names.json"
    assert cfg.resolve_path("missing", "data/x.json") == config.PROJECT_ROOT / "data" / "x.json"


def test_invalid_concurrency_falls_back(tmp_path, monkeypatch):
    path = _write_config(tmp_path, "resolver:\n  max_concurrency: many\n")
    monkeypatch.setenv(config.CONFIG_ENV_VAR, str(path))
    config.reset_config()
    assert config.get_config().max_concurrency == config.DEFAULT_MAX_CONCURRENCY


def test_missing_config_file_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv(config.CONFIG_ENV_VAR, str(tmp_path / "absent.yml"))
    config.reset_config()

    cfg = config.get_config()
    assert cfg.max_concurrency == config.DEFAULT_MAX_CONCURRENCY
    assert cfg.debug is False


def test_resolver_takes_concurrency_from_config(tmp_path, monkeypatch):
    path = _write_config(tmp_path, "resolver:\n  max_concurrency: 3\n")
    monkeypatch.setenv(config.CONFIG_ENV_VAR, str(path))
    config.reset_config()

    assert CrossReferenceResolver(lambda fid: None, lambda fid, text: None).max_concurrency == 3
    assert CrossReferenceResolver(lambda fid: None, lambda fid, text: None, max_concurrency=8).max_concurrency == 8


def test_loggers_live_under_package_namespace():
    log = get_logger("resolver_test")
    assert log.name == "family_xref.resolver_test"
    assert get_logger("family_xref.citation").name == "family_xref.citation"
    assert "family_xref.resolver_test" in list_active_loggers()


def test_log_settings_from_config():
    cfg = config.XrefConfig({"logging": {"level": "warning", "file": "xref.log"}})
    settings = LogSettings.from_config(cfg)
    assert settings.level == logging.WARNING
    assert settings.console_level == logging.WARNING
    assert settings.log_dir == config.PROJECT_ROOT / "logs"
    assert settings.master_file == "xref.log"
    assert not settings.rotate


def test_debug_flag_forces_debug_everywhere(tmp_path):
    cfg = config.XrefConfig({"debug": True, "logging": {"level": "ERROR", "rotate": True, "dir": str(tmp_path)}})
    settings = LogSettings.from_config(cfg)
    assert settings.level == logging.DEBUG
    assert settings.console_level == logging.DEBUG
    assert settings.log_dir == tmp_path
    assert settings.rotate
