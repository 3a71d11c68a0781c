from __future__ import annotations

import logging
import os
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.settings import Settings, settings
from messaging.dispatcher import DispatchService
from messaging.provider import ProviderClientManager
from ops.structured_logger import setup_logging
from utils.request_context import clear_request_id, resolve_request_id, set_request_id

from app.routers.health import router as health_router
from app.routers.notify import router as notify_router

log = logging.getLogger("notify.api")


def _get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or request.headers.get("x-request-id") or ""


def create_app(app_settings: Optional[Settings] = None, manager: Optional[ProviderClientManager] = None) -> FastAPI:
    """
    Composition root: one provider manager and one dispatch service per app.

    Pass a pre-built manager to swap in test doubles; it is initialized
    here only if it has not been already.
    """
    cfg = app_settings or settings
    setup_logging(cfg.LOG_LEVEL)

    if manager is None:
        manager = ProviderClientManager()
    manager.initialize(cfg)

    app = FastAPI(title="Notify API", version="1.0.0")
    app.state.settings = cfg
    app.state.provider_manager = manager
    app.state.dispatcher = DispatchService(manager, default_number=cfg.PROVIDER_NUMBER)

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        rid = resolve_request_id(request.headers.get("x-request-id"))
        request.state.request_id = rid
        set_request_id(rid)
        try:
            response = await call_next(request)
        finally:
            clear_request_id()
        response.headers["X-Request-Id"] = rid
        return response

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        rid = _get_request_id(request)
        log.warning(
            "http_exception",
            extra={
                "extra": {
                    "event": "http_exception",
                    "status_code": exc.status_code,
                    "detail": exc.detail,
                    "path": request.url.path,
                    "method": request.method,
                    "request_id": rid,
                }
            },
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail, "request_id": rid, "revision": os.getenv("K_REVISION") or ""},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        rid = _get_request_id(request)
        log.warning(
            "validation_error",
            extra={
                "extra": {
                    "event": "validation_error",
                    "path": request.url.path,
                    "method": request.method,
                    "request_id": rid,
                }
            },
        )
        return JSONResponse(
            status_code=422,
            content={"detail": exc.errors(), "request_id": rid, "revision": os.getenv("K_REVISION") or ""},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        rid = _get_request_id(request)
        log.error(
            "internal_unhandled_exception",
            extra={
                "extra": {
                    "event": "internal_unhandled_exception",
                    "error_type": type(exc).__name__,
                    "path": request.url.path,
                    "method": request.method,
                    "request_id": rid,
                }
            },
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={"error": "internal_unhandled_exception", "request_id": rid, "revision": os.getenv("K_REVISION") or ""},
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins() or ["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(health_router, tags=["health"])
    app.include_router(notify_router, prefix="/notify", tags=["notify"])
    # Public prefix of the original service; kept as an alias.
    app.include_router(notify_router, prefix="/api/notify", tags=["notify"], include_in_schema=False)
    return app


app = create_app()
