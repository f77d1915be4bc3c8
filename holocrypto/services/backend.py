"""Helpers for talking to the assistant backend (/api/ask, /api/markets)."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from holocrypto.config.settings import get_settings

logger = logging.getLogger("holocrypto.backend")


ASK_PATH = "/api/ask"
MARKETS_PATH = "/api/markets"


class TransportError(RuntimeError):
    """The backend could not be reached or did not answer with JSON."""


class UpstreamError(RuntimeError):
    """The backend answered with a non-success status."""

    def __init__(self, status_code: int, detail: Optional[str]):
        super().__init__(detail or f"HTTP {status_code}")
        self.status_code = status_code
        self.detail = detail


def _detail(body: Any) -> Optional[str]:
    if isinstance(body, dict) and isinstance(body.get("detail"), str):
        return body["detail"]
    return None


class BackendClient:
    """
    Thin async wrapper over httpx for the two backend endpoints.

    Pass `transport` to swap the network layer (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        s = get_settings()
        self.base_url = s.BACKEND_URL if base_url is None else base_url.rstrip("/")
        self.timeout = s.REQUEST_TIMEOUT_SECONDS if timeout is None else timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url or "http://localhost",
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            async with self._client() as client:
                response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("backend unreachable | %s %s | err=%s", method, path, exc)
            raise TransportError(str(exc)) from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.is_success:
            detail = _detail(body)
            logger.info("backend error | %s %s | status=%s | detail=%s", method, path, response.status_code, detail)
            raise UpstreamError(response.status_code, detail)

        if body is None:
            raise TransportError(f"Non-JSON response from {path}")
        return body

    async def ask(self, query: str) -> Any:
        """POST the raw query text; returns the decoded envelope."""
        return await self._request("POST", ASK_PATH, json={"query": query})

    async def markets(self, per_page: Optional[int] = None, sparkline: Optional[bool] = None) -> Any:
        s = get_settings()
        params = {
            "per_page": s.MARKETS_PER_PAGE if per_page is None else per_page,
            "sparkline": str(s.MARKETS_SPARKLINE if sparkline is None else sparkline).lower(),
        }
        return await self._request("GET", MARKETS_PATH, params=params)
