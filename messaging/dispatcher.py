from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from messaging.provider import ProviderClientManager
from messaging.result import DispatchResult, Failure, FailureKind, Success
from ops.metrics import Timer

log = logging.getLogger("notify.dispatcher")


def _dest_hint(v: Any, keep: int = 4) -> str:
    v = str(v or "").strip()
    if not v:
        return ""
    if len(v) <= keep:
        return v
    return f"...{v[-keep:]}"


def _provider_error_details(e: Exception) -> Dict[str, Any]:
    # TwilioRestException carries status/code/msg; other errors only have str(e)
    details: Dict[str, Any] = {"error_type": type(e).__name__, "message": str(e)}
    for attr in ("status", "code", "msg", "uri"):
        val = getattr(e, attr, None)
        if val is not None:
            details[f"provider_{attr}"] = val
    return details


class DispatchService:
    """
    Validates notification requests and forwards each one as a single
    provider call. Every outcome comes back as a DispatchResult; nothing
    raised by the provider escapes this class.
    """

    def __init__(self, provider: ProviderClientManager, default_number: str = ""):
        self.provider = provider
        self.default_number = (default_number or "").strip()

    def _reject(self, channel: str, kind: FailureKind, message: str) -> Failure:
        log.warning(
            "message_send_rejected",
            extra={"extra": {"event": "message_send_rejected", "channel": channel, "kind": kind.value, "message": message}},
        )
        return Failure(kind=kind, message=message)

    def send_text(self, recipient: Any, body: Any) -> DispatchResult:
        messaging = self.provider.get_messaging()
        if messaging is None:
            return self._reject("sms", FailureKind.UNAVAILABLE, "messaging client is not initialized")
        sender = self.default_number
        if not sender:
            return self._reject("sms", FailureKind.CONFIGURATION, "PROVIDER_NUMBER is not configured")
        if not recipient:
            return self._reject("sms", FailureKind.INVALID_ARGUMENT, "recipient 'to' is required")
        if not isinstance(body, str):
            return self._reject("sms", FailureKind.INVALID_ARGUMENT, "'message' must be a string")

        payload = {"from": sender, "to": recipient, "text": body}
        return self._issue("sms", recipient, lambda: messaging.send_sms(payload))

    def place_call(self, recipient: Any, application_reference: Any, caller_id: Optional[str] = None) -> DispatchResult:
        caller = str(caller_id or "").strip() or self.default_number

        voice = self.provider.get_voice()
        if voice is None:
            return self._reject("voice", FailureKind.UNAVAILABLE, "voice client is not initialized")
        if not caller:
            return self._reject("voice", FailureKind.CONFIGURATION, "caller id is not set and PROVIDER_NUMBER is not configured")
        if not recipient:
            return self._reject("voice", FailureKind.INVALID_ARGUMENT, "recipient 'to' is required")
        if not application_reference:
            return self._reject("voice", FailureKind.INVALID_ARGUMENT, "application reference is required")

        payload = {"from": caller, "to": recipient, "appRef": application_reference}
        return self._issue("voice", recipient, lambda: voice.create_call(payload))

    def _issue(self, channel: str, recipient: Any, call) -> DispatchResult:
        rev = os.getenv("K_REVISION") or ""
        timer = Timer()
        log.info(
            "message_send_attempt",
            extra={"extra": {"event": "message_send_attempt", "channel": channel, "dest": _dest_hint(recipient), "revision": rev}},
        )
        try:
            resp = call()
        except Exception as e:
            log.error(
                "message_send_exception",
                extra={
                    "extra": {
                        "event": "message_send_exception",
                        "channel": channel,
                        "dest": _dest_hint(recipient),
                        "latency_ms": timer.ms(),
                        "revision": rev,
                        **_provider_error_details(e),
                    }
                },
                exc_info=True,
            )
            return Failure(kind=FailureKind.PROVIDER_ERROR, message=str(e))

        log.info(
            "message_send_result",
            extra={
                "extra": {
                    "event": "message_send_result",
                    "channel": channel,
                    "dest": _dest_hint(recipient),
                    "ok": True,
                    "latency_ms": timer.ms(),
                    "revision": rev,
                }
            },
        )
        return Success(provider_response=resp)
