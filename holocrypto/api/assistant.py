# holocrypto/api/assistant.py
from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from holocrypto.config.settings import get_settings
from holocrypto.schemas.views import ErrorView
from holocrypto.services.backend import BackendClient
from holocrypto.services.client import AssistantClient
from holocrypto.services.market_view import load_market_list
from holocrypto.services.voice import PushSpeechCapture

logger = logging.getLogger("holocrypto.api")

router = APIRouter(prefix="/assistant", tags=["assistant"])


class AskRequest(BaseModel):
    query: str = ""


class VoiceResultRequest(BaseModel):
    alternatives: List[str] = Field(default_factory=list, description="Transcripts, best first")


# one assistant client per caller, least recently used evicted past the cap;
# nothing here outlives the process
_clients: OrderedDict[str, AssistantClient] = OrderedDict()


def make_client() -> AssistantClient:
    return AssistantClient(backend=BackendClient(), capture=PushSpeechCapture())


def get_client(x_client_id: str = Header("default")) -> AssistantClient:
    client = _clients.get(x_client_id)
    if client is not None:
        _clients.move_to_end(x_client_id)
        return client

    client = make_client()
    _clients[x_client_id] = client
    logger.info("assistant client created | client_id=%s", x_client_id)

    limit = get_settings().MAX_CLIENTS
    while len(_clients) > limit:
        evicted, _ = _clients.popitem(last=False)
        logger.info("assistant client evicted | client_id=%s | limit=%s", evicted, limit)
    return client


def drop_client(client_id: str) -> bool:
    return _clients.pop(client_id, None) is not None


def reset_clients() -> None:
    _clients.clear()


def _error_response(
    *,
    code: str,
    message: str,
    status_code: int = 400,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    payload: Dict[str, Any] = {"error": {"code": code, "message": message}}
    if details:
        payload["error"]["details"] = details
    return JSONResponse(status_code=status_code, content=payload)


@router.post("/ask")
async def ask(body: AskRequest, client: AssistantClient = Depends(get_client)):
    await client.router.ask(body.query)
    return client.snapshot()


@router.get("/markets")
async def markets(
    per_page: Optional[int] = None,
    sparkline: Optional[bool] = None,
    client: AssistantClient = Depends(get_client),
):
    view = await load_market_list(client.backend, per_page=per_page, sparkline=sparkline)
    if isinstance(view, ErrorView):
        return _error_response(code="markets_unavailable", message=view.message, status_code=502)
    return view.model_dump()


@router.get("/state")
async def state(client: AssistantClient = Depends(get_client)):
    return client.snapshot()


@router.post("/reset")
async def reset(client: AssistantClient = Depends(get_client)):
    client.router.reset()
    return client.snapshot()


@router.post("/voice/start")
async def voice_start(client: AssistantClient = Depends(get_client)):
    client.voice.start()
    return client.snapshot()


@router.post("/voice/stop")
async def voice_stop(client: AssistantClient = Depends(get_client)):
    client.voice.stop()
    return client.snapshot()


@router.post("/voice/result")
async def voice_result(body: VoiceResultRequest, client: AssistantClient = Depends(get_client)):
    capture = client.voice.capture
    if not isinstance(capture, PushSpeechCapture):
        return _error_response(code="speech_unavailable", message="Speech input is not available", status_code=409)
    await capture.deliver(body.alternatives)
    return client.snapshot()


@router.post("/voice/end")
async def voice_end(client: AssistantClient = Depends(get_client)):
    capture = client.voice.capture
    if isinstance(capture, PushSpeechCapture):
        capture.finish()
    return client.snapshot()


@router.delete("")
async def forget(x_client_id: str = Header("default")):
    """Discard this caller's assistant; the next request starts fresh."""
    dropped = drop_client(x_client_id)
    logger.info("assistant client dropped | client_id=%s | existed=%s", x_client_id, dropped)
    return {"dropped": dropped}
