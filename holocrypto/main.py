# holocrypto/main.py
from __future__ import annotations

import logging

from fastapi import FastAPI

from holocrypto.api.assistant import router as assistant_router
from holocrypto.api.assistant import reset_clients
from holocrypto.api.health import router as health_router
from holocrypto.config.settings import get_settings

logger = logging.getLogger("holocrypto.main")


app = FastAPI(title="Holographic Crypto Assistant")

# Routers
app.include_router(health_router)
app.include_router(assistant_router)


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "Ask about any coin or token."}


@app.on_event("startup")
async def on_startup() -> None:
    settings = get_settings()
    logger.info("assistant api started | backend=%s", settings.BACKEND_URL or "(same origin)")


@app.on_event("shutdown")
async def on_shutdown() -> None:
    reset_clients()
