from __future__ import annotations

import uuid
from contextvars import ContextVar
from typing import Optional

_request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def resolve_request_id(header_value: Optional[str]) -> str:
    """Reuse the caller's X-Request-Id when present, otherwise mint one."""
    v = (header_value or "").strip()
    return v[:128] if v else str(uuid.uuid4())

def set_request_id(rid: str) -> None:
    _request_id_var.set(rid or "")

def get_request_id() -> str:
    return _request_id_var.get() or ""

def clear_request_id() -> None:
    _request_id_var.set("")
