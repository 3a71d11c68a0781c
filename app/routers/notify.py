from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from config.settings import Settings
from messaging.dispatcher import DispatchService
from messaging.result import Failure, FailureKind
from utils.request_context import get_request_id

log = logging.getLogger("notify.router.notify")
router = APIRouter()

_STRICT_STATUS = {
    FailureKind.INVALID_ARGUMENT: 400,
    FailureKind.CONFIGURATION: 503,
    FailureKind.UNAVAILABLE: 503,
    FailureKind.PROVIDER_ERROR: 502,
}


class SmsRequest(BaseModel):
    # Presence is checked by the handler so a missing field is a 400, not a 422.
    to: Any = None
    message: Any = None


class CallRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    to: Any = None
    app: Any = None
    from_: Optional[str] = Field(default=None, alias="from")


def get_dispatcher(request: Request) -> DispatchService:
    return request.app.state.dispatcher


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def _failure_response(result: Failure, error: str, cfg: Settings) -> JSONResponse:
    status_code = _STRICT_STATUS.get(result.kind, 500) if cfg.STRICT_ERROR_STATUS else 500
    log.warning(
        "notify_dispatch_failed",
        extra={"extra": {"event": "notify_dispatch_failed", "kind": result.kind.value, "status_code": status_code}},
    )
    # result.message stays in the logs; callers only get the fixed error string.
    return JSONResponse(status_code=status_code, content={"error": error, "request_id": get_request_id()})


@router.post("/sms")
def notify_sms(
    req: Optional[SmsRequest] = None,
    dispatcher: DispatchService = Depends(get_dispatcher),
    cfg: Settings = Depends(get_app_settings),
):
    req = req or SmsRequest()
    if not req.to or not req.message:
        raise HTTPException(status_code=400, detail="Missing 'to' or 'message'")

    result = dispatcher.send_text(req.to, req.message)
    if isinstance(result, Failure):
        return _failure_response(result, "Failed to send SMS", cfg)
    return {"success": True, "response": result.provider_response}


@router.post("/call")
def notify_call(
    req: Optional[CallRequest] = None,
    dispatcher: DispatchService = Depends(get_dispatcher),
    cfg: Settings = Depends(get_app_settings),
):
    req = req or CallRequest()
    if not req.to or not req.app:
        raise HTTPException(status_code=400, detail="Missing 'to' or 'app'")

    result = dispatcher.place_call(req.to, req.app, caller_id=req.from_)
    if isinstance(result, Failure):
        return _failure_response(result, "Failed to initiate call", cfg)
    return {"success": True, "response": result.provider_response}
