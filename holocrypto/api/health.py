# holocrypto/api/health.py
from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Response

from holocrypto.config.settings import get_settings
from holocrypto.services.backend import BackendClient, TransportError, UpstreamError

router = APIRouter(tags=["health"])

APP_STARTED_AT = time.time()


def _now_meta() -> Dict[str, Any]:
    now_ts = time.time()
    now_dt = datetime.fromtimestamp(now_ts, tz=timezone.utc)
    return {
        "now_ts": now_ts,
        "now_unix": int(now_ts),
        "now_iso": now_dt.isoformat().replace("+00:00", "Z"),
        "uptime_s": int(now_ts - APP_STARTED_AT),
    }


async def _check_backend() -> Dict[str, Any]:
    """Cheapest backend round trip: a one-row market list."""
    t0 = time.time()
    try:
        await BackendClient().markets(per_page=1, sparkline=False)
        return {"ok": True, "latency_ms": int((time.time() - t0) * 1000)}
    except UpstreamError as e:
        return {
            "ok": False,
            "latency_ms": int((time.time() - t0) * 1000),
            "status_code": e.status_code,
            "error": str(e),
        }
    except TransportError as e:
        return {
            "ok": False,
            "latency_ms": int((time.time() - t0) * 1000),
            "error": str(e),
        }


@router.get("/live")
async def live():
    return {"status": "ok"}


@router.get("/ready")
async def ready(response: Response):
    payload: Dict[str, Any] = {
        "status": "ok",
        **_now_meta(),
        "backend_url": get_settings().BACKEND_URL or None,
        "checks": {"backend": await _check_backend()},
    }

    if not payload["checks"]["backend"]["ok"]:
        payload["status"] = "degraded"
        payload["degraded"] = True
        payload["degraded_reasons"] = ["backend_unreachable"]
        response.status_code = 503
    else:
        payload["degraded"] = False
        payload["degraded_reasons"] = []

    return payload
