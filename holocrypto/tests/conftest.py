from __future__ import annotations

from typing import Callable

import httpx
import pytest

from holocrypto.config.settings import reset_settings
from holocrypto.services.backend import BackendClient

BACKEND_URL = "http://backend.test"

_ENV_VARS = (
    "HOLO_BACKEND_URL",
    "HOLO_REQUEST_TIMEOUT_SECONDS",
    "HOLO_MARKETS_PER_PAGE",
    "HOLO_MARKETS_SPARKLINE",
    "HOLO_MAX_CLIENTS",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_settings(monkeypatch):
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture()
def make_backend() -> Callable[..., BackendClient]:
    """Build a BackendClient whose requests are answered by `handler`."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> BackendClient:
        return BackendClient(base_url=BACKEND_URL, transport=httpx.MockTransport(handler))

    return _make
