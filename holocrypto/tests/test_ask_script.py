from __future__ import annotations

import json

import httpx
import pytest

from holocrypto.scripts import ask as ask_script
from holocrypto.services.backend import BackendClient


@pytest.fixture()
def fake_backend(monkeypatch):
    state = {"ask": {"kind": "token", "data": {"name": "Ethereum", "symbol": "eth"}}, "status": 200}

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/markets":
            return httpx.Response(200, json=[{"id": "bitcoin", "name": "Bitcoin", "symbol": "btc", "current_price": 1}])
        return httpx.Response(state["status"], json=state["ask"])

    def _backend(base_url=None, **kwargs):
        return BackendClient(base_url=base_url or "http://backend.test", transport=httpx.MockTransport(handler))

    monkeypatch.setattr(ask_script, "BackendClient", _backend)
    return state


def test_query_prints_view(fake_backend, capsys):
    with pytest.raises(SystemExit) as excinfo:
        ask_script.main(["tell", "me", "about", "ethereum"])
    assert excinfo.value.code == 0
    out = json.loads(capsys.readouterr().out)
    assert out["query"] == "tell me about ethereum"
    assert out["view"]["kind"] == "token"
    assert out["view"]["description"] == "No description available."


def test_failed_query_exits_nonzero(fake_backend, capsys):
    fake_backend["status"] = 500
    fake_backend["ask"] = {"detail": "backend exploded"}
    with pytest.raises(SystemExit) as excinfo:
        ask_script.main(["price of bitcoin"])
    assert excinfo.value.code == 1
    assert json.loads(capsys.readouterr().out)["view"]["message"] == "backend exploded"


def test_markets_flag(fake_backend, capsys):
    with pytest.raises(SystemExit) as excinfo:
        ask_script.main(["--markets", "--per-page", "1"])
    assert excinfo.value.code == 0
    assert json.loads(capsys.readouterr().out)["cards"][0]["symbol"] == "BTC"


def test_query_required(fake_backend):
    with pytest.raises(SystemExit) as excinfo:
        ask_script.main([])
    assert excinfo.value.code == 2
