from __future__ import annotations

import json

import httpx
import pytest

from holocrypto.config.settings import reset_settings
from holocrypto.schemas.views import ErrorView, MarketListView
from holocrypto.services.backend import BackendClient, TransportError, UpstreamError
from holocrypto.services.market_view import MARKETS_FAILURE, load_market_list
from holocrypto.utils.formatting import UNAVAILABLE

COIN = {
    "id": "ethereum",
    "name": "Ethereum",
    "symbol": "eth",
    "image": "https://img.test/eth.png",
    "current_price": 3120.5,
    "price_change_percentage_24h": None,
    "sparkline_in_7d": {"price": [3000.0, 3050.5, None, 3120.5]},
}


@pytest.mark.asyncio
async def test_markets_uses_configured_defaults(monkeypatch, make_backend):
    monkeypatch.setenv("HOLO_MARKETS_PER_PAGE", "5")
    reset_settings()
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[COIN])

    body = await make_backend(handler).markets()

    assert body == [COIN]
    assert seen[0].url.path == "/api/markets"
    assert seen[0].url.params["per_page"] == "5"
    assert seen[0].url.params["sparkline"] == "true"


@pytest.mark.asyncio
async def test_explicit_markets_params(make_backend):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    await make_backend(handler).markets(per_page=1, sparkline=False)
    assert seen[0].url.params["per_page"] == "1"
    assert seen[0].url.params["sparkline"] == "false"


@pytest.mark.asyncio
async def test_upstream_error_carries_detail(make_backend):
    backend = make_backend(lambda request: httpx.Response(429, json={"detail": "Too many requests"}))
    with pytest.raises(UpstreamError) as excinfo:
        await backend.ask("price of bitcoin")
    assert excinfo.value.status_code == 429
    assert excinfo.value.detail == "Too many requests"


@pytest.mark.asyncio
async def test_non_json_success_is_a_transport_error(make_backend):
    backend = make_backend(lambda request: httpx.Response(200, text="not json"))
    with pytest.raises(TransportError):
        await backend.ask("price of bitcoin")


@pytest.mark.asyncio
async def test_network_failure_is_a_transport_error(make_backend):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(TransportError):
        await make_backend(handler).markets()


def test_base_url_from_settings(monkeypatch):
    monkeypatch.setenv("HOLO_BACKEND_URL", "https://api.example.test/")
    monkeypatch.setenv("HOLO_REQUEST_TIMEOUT_SECONDS", "2.5")
    reset_settings()
    client = BackendClient()
    assert client.base_url == "https://api.example.test"
    assert client.timeout == 2.5


@pytest.mark.asyncio
async def test_market_list_view(make_backend):
    view = await load_market_list(make_backend(lambda request: httpx.Response(200, json=[COIN])))

    assert isinstance(view, MarketListView)
    card = view.cards[0]
    assert card.symbol == "ETH"
    assert card.price == "$3,120.5"
    assert card.change_24h == "0%"
    assert card.change_direction == "up"
    assert card.sparkline == [3000.0, 3050.5, 3120.5]


@pytest.mark.asyncio
async def test_market_list_errors(make_backend):
    upstream = await load_market_list(make_backend(lambda request: httpx.Response(503, json={"detail": "CoinGecko down"})))
    assert upstream == ErrorView(message="CoinGecko down")

    generic = await load_market_list(make_backend(lambda request: httpx.Response(502, text="bad gateway")))
    assert generic == ErrorView(message=MARKETS_FAILURE)

    malformed = await load_market_list(make_backend(lambda request: httpx.Response(200, json={"coins": []})))
    assert malformed == ErrorView(message=MARKETS_FAILURE)


@pytest.mark.asyncio
async def test_partially_malformed_market_list_keeps_good_rows(make_backend):
    rows = [
        COIN,
        {"id": "junk", "name": None, "symbol": 7, "current_price": "n/a", "price_change_percentage_24h": "?"},
        {"name": "no id", "current_price": 1.0},
        {"id": "", "current_price": 1.0},
        "not a row",
        {"id": "huge", "symbol": "hg", "current_price": json.loads("1" + "0" * 400), "sparkline_in_7d": [1, 2]},
    ]
    view = await load_market_list(make_backend(lambda request: httpx.Response(200, json=rows)))

    assert isinstance(view, MarketListView)
    assert [c.id for c in view.cards] == ["ethereum", "junk", "huge"]
    assert view.cards[0].price == "$3,120.5"

    junk = view.cards[1]
    assert junk.name == ""
    assert junk.symbol == ""
    assert junk.price == UNAVAILABLE
    assert junk.change_24h == "0%"
    assert junk.change_direction == "up"

    assert view.cards[2].price == UNAVAILABLE
    assert view.cards[2].sparkline == []
