from fastapi.testclient import TestClient

from app.api_service import create_app
from messaging.provider import ProviderClientManager
from fakes import EchoMessaging, EchoVoice, FakeClient, make_settings


def test_health_reports_unconfigured_provider():
    mgr = ProviderClientManager(client_factory=FakeClient)
    client = TestClient(create_app(make_settings(PROVIDER_ACCESS_KEY_ID=""), manager=mgr))
    body = client.get("/health").json()
    assert body["ok"] is False
    assert body["messaging_ready"] is False
    assert body["provider_error"] == "configuration_error"


def test_health_ready_with_both_capabilities():
    mgr = ProviderClientManager.from_capabilities(messaging=EchoMessaging(), voice=EchoVoice())
    body = TestClient(create_app(make_settings(), manager=mgr)).get("/health").json()
    assert body["ok"] is True
    assert body["voice_ready"] is True
