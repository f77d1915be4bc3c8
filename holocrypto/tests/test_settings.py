from __future__ import annotations

import pytest

from holocrypto.config.settings import Settings, get_settings, parse_bool, parse_float, parse_int, reset_settings


def test_defaults():
    s = Settings.from_env()
    assert s.BACKEND_URL == ""
    assert s.REQUEST_TIMEOUT_SECONDS == 10.0
    assert s.MARKETS_PER_PAGE == 12
    assert s.MARKETS_SPARKLINE is True
    assert s.MAX_CLIENTS == 256
    assert s.LOG_LEVEL == "INFO"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("HOLO_BACKEND_URL", "http://localhost:8000/")
    monkeypatch.setenv("HOLO_MARKETS_SPARKLINE", "off")
    monkeypatch.setenv("HOLO_MARKETS_PER_PAGE", "25")
    monkeypatch.setenv("HOLO_MAX_CLIENTS", "0")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    s = Settings.from_env()
    assert s.BACKEND_URL == "http://localhost:8000"
    assert s.MARKETS_SPARKLINE is False
    assert s.MARKETS_PER_PAGE == 25
    assert s.MAX_CLIENTS == 1
    assert s.LOG_LEVEL == "DEBUG"


def test_get_settings_is_cached_until_reset(monkeypatch):
    first = get_settings()
    monkeypatch.setenv("HOLO_MARKETS_PER_PAGE", "3")
    assert get_settings() is first
    reset_settings()
    assert get_settings().MARKETS_PER_PAGE == 3


def test_parsers():
    assert parse_bool(None, True) is True
    assert parse_bool(" Yes ", False) is True
    assert parse_bool("0", True) is False
    assert parse_int("  ", 7) == 7
    assert parse_float("1.5", 0.0) == 1.5
    with pytest.raises(ValueError):
        parse_int("many", 1)
