from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from twilio.rest import Client

from config.settings import Settings

log = logging.getLogger("notify.provider")


class ConfigurationError(RuntimeError):
    """A setting required to talk to the provider is missing."""


def _iso(v: Any) -> Optional[str]:
    if v is None:
        return None
    return v.isoformat() if hasattr(v, "isoformat") else str(v)


class MessagingCapability:
    """SMS sub-handle bound to one authenticated provider client."""

    def __init__(self, client: Any):
        self._messages = client.messages

    def send_sms(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        msg = self._messages.create(to=payload["to"], from_=payload["from"], body=payload["text"])
        return {
            "sid": msg.sid,
            "status": msg.status,
            "to": msg.to,
            "from": msg.from_,
            "num_segments": msg.num_segments,
            "date_created": _iso(msg.date_created),
        }


class VoiceCapability:
    """Outbound call sub-handle; appRef is the TwiML Application SID that drives the call."""

    def __init__(self, client: Any):
        self._calls = client.calls

    def create_call(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        call = self._calls.create(to=payload["to"], from_=payload["from"], application_sid=payload["appRef"])
        return {
            "sid": call.sid,
            "status": call.status,
            "to": call.to,
            "from": call.from_,
            "date_created": _iso(call.date_created),
        }


class ProviderClientManager:
    """
    Owns the provider client and its messaging/voice capabilities.

    Built once per process by the composition root. Initialization is
    single-shot: failures are logged, never raised, and leave the affected
    capabilities absent for the lifetime of the manager.
    """

    def __init__(self, client_factory: Optional[Callable[..., Any]] = None):
        self._client_factory = client_factory or Client
        self._client: Optional[Any] = None
        self._messaging: Optional[MessagingCapability] = None
        self._voice: Optional[VoiceCapability] = None
        self._initialized = False
        self._init_error = ""

    @classmethod
    def from_capabilities(
        cls,
        messaging: Optional[Any] = None,
        voice: Optional[Any] = None,
    ) -> "ProviderClientManager":
        mgr = cls()
        mgr._messaging = messaging
        mgr._voice = voice
        mgr._initialized = True
        if messaging is None and voice is None:
            mgr._init_error = "not_configured"
        return mgr

    def initialize(self, config: Settings) -> None:
        if self._initialized:
            return
        self._initialized = True

        try:
            self._client = self._build_client(config)
        except ConfigurationError as e:
            self._init_error = "configuration_error"
            log.error(
                "provider_config_missing",
                extra={"extra": {"event": "provider_config_missing", "message": str(e)}},
            )
            return
        except Exception as e:
            self._init_error = "client_init_failed"
            log.error(
                "provider_init_failed",
                extra={"extra": {"event": "provider_init_failed", "error_type": type(e).__name__}},
                exc_info=True,
            )
            return

        self._messaging = self._derive("messaging", MessagingCapability)
        self._voice = self._derive("voice", VoiceCapability)
        log.info(
            "provider_init_ok",
            extra={
                "extra": {
                    "event": "provider_init_ok",
                    "messaging_ready": self._messaging is not None,
                    "voice_ready": self._voice is not None,
                }
            },
        )

    def _build_client(self, config: Settings) -> Any:
        key_id = (config.PROVIDER_ACCESS_KEY_ID or "").strip()
        if not key_id:
            raise ConfigurationError("PROVIDER_ACCESS_KEY_ID is not configured")

        kwargs: Dict[str, Any] = {}
        if config.PROVIDER_EDGE:
            kwargs["edge"] = config.PROVIDER_EDGE
        if config.PROVIDER_REGION:
            kwargs["region"] = config.PROVIDER_REGION
        return self._client_factory(key_id, config.PROVIDER_ACCESS_KEY_SECRET or None, **kwargs)

    def _derive(self, name: str, capability_cls: Callable[[Any], Any]) -> Optional[Any]:
        if self._client is None:
            return None
        try:
            return capability_cls(self._client)
        except Exception as e:
            log.error(
                "provider_capability_init_failed",
                extra={"extra": {"event": "provider_capability_init_failed", "capability": name, "error_type": type(e).__name__}},
                exc_info=True,
            )
            return None

    def get_messaging(self) -> Optional[MessagingCapability]:
        return self._messaging

    def get_voice(self) -> Optional[VoiceCapability]:
        return self._voice

    @property
    def ready(self) -> bool:
        return self._messaging is not None and self._voice is not None

    def status(self) -> Dict[str, Any]:
        return {
            "initialized": self._initialized,
            "messaging_ready": self._messaging is not None,
            "voice_ready": self._voice is not None,
            "error": self._init_error,
        }
