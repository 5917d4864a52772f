"""
Tests for MarketLens settings
"""

import pytest
import logging
from logging.handlers import RotatingFileHandler
from pydantic import ValidationError

from marketlens.config import log_setup
from marketlens.config.settings import Settings


def test_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    config = Settings(_env_file=None)

    assert config.QUERY_TTL_HOURS == 24
    assert config.STRICT_STATUS_TRANSITIONS is False
    assert config.CLEANUP_INTERVAL_MINUTES == 0
    assert config.API_PREFIX == "/api/v1"


def test_rejects_non_sqlite_url(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    with pytest.raises(ValidationError):
        Settings(_env_file=None, DATABASE_URL="postgresql://localhost/marketlens")


def test_async_database_url(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    config = Settings(_env_file=None, DATABASE_URL="sqlite:///data/test.db")

    assert config.get_database_url_async() == "sqlite+aiosqlite:///data/test.db"


def test_environment_overrides(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("QUERY_TTL_HOURS", "48")
    monkeypatch.setenv("STRICT_STATUS_TRANSITIONS", "true")
    monkeypatch.setenv("CLEANUP_INTERVAL_MINUTES", "15")

    config = Settings(_env_file=None)

    assert config.QUERY_TTL_HOURS == 48
    assert config.STRICT_STATUS_TRANSITIONS is True
    assert config.CLEANUP_INTERVAL_MINUTES == 15


def test_negative_interval_rejected(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    with pytest.raises(ValidationError):
        Settings(_env_file=None, CLEANUP_INTERVAL_MINUTES=-1)


def test_setup_logging_writes_rotating_file(tmp_path, monkeypatch):
    monkeypatch.setattr(log_setup, "_configured", False)
    root = logging.getLogger()
    existing = list(root.handlers)
    log_file = tmp_path / "logs" / "marketlens.log"

    try:
        log_setup.setup_logging("DEBUG", str(log_file))
        logging.getLogger("marketlens.test").info("hello")

        added = [h for h in root.handlers if h not in existing]
        assert any(isinstance(h, RotatingFileHandler) for h in added)
        for handler in added:
            handler.flush()
        assert "hello" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in [h for h in root.handlers if h not in existing]:
            root.removeHandler(handler)
            handler.close()
