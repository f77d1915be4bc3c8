# holocrypto/config/settings.py
from __future__ import annotations

import os
from dataclasses import dataclass


def parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def parse_int(value: str | None, default: int) -> int:
    if value is None or value.strip() == "":
        return default
    return int(value)


def parse_float(value: str | None, default: float) -> float:
    if value is None or value.strip() == "":
        return default
    return float(value)


@dataclass(frozen=True)
class Settings:
    BACKEND_URL: str
    REQUEST_TIMEOUT_SECONDS: float
    MARKETS_PER_PAGE: int
    MARKETS_SPARKLINE: bool
    MAX_CLIENTS: int
    LOG_LEVEL: str

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            # empty means "same origin": paths are requested relative to the client base
            BACKEND_URL=os.getenv("HOLO_BACKEND_URL", "").rstrip("/"),
            REQUEST_TIMEOUT_SECONDS=parse_float(os.getenv("HOLO_REQUEST_TIMEOUT_SECONDS"), 10.0),
            MARKETS_PER_PAGE=parse_int(os.getenv("HOLO_MARKETS_PER_PAGE"), 12),
            MARKETS_SPARKLINE=parse_bool(os.getenv("HOLO_MARKETS_SPARKLINE"), True),
            MAX_CLIENTS=max(1, parse_int(os.getenv("HOLO_MAX_CLIENTS"), 256)),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the env."""
    global _settings
    _settings = None
