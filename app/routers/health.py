from __future__ import annotations

import os
import time
from typing import Any, Dict

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
def health(request: Request):
    rev = os.getenv("K_REVISION") or ""
    svc = os.getenv("K_SERVICE") or "notify-api"
    provider = request.app.state.provider_manager.status()

    payload: Dict[str, Any] = {
        "ok": bool(provider["messaging_ready"] and provider["voice_ready"]),
        "service": "notify-api",
        "cloudrun_service": svc,
        "revision": rev,
        "environment": request.app.state.settings.ENVIRONMENT,
        "messaging_ready": provider["messaging_ready"],
        "voice_ready": provider["voice_ready"],
        "provider_error": provider["error"],
        "time_unix": time.time(),
    }
    return payload
