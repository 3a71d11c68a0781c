from messaging.dispatcher import DispatchService
from messaging.provider import ProviderClientManager
from messaging.result import Failure, FailureKind, Success
from fakes import EchoMessaging, EchoVoice, FailingVoice


def _svc(messaging=None, voice=None, number="+15550000000"):
    mgr = ProviderClientManager.from_capabilities(messaging=messaging, voice=voice)
    return DispatchService(mgr, default_number=number)


def test_send_text_unavailable_without_messaging():
    res = _svc().send_text("+15551234567", "hi")
    assert isinstance(res, Failure)
    assert res.kind == FailureKind.UNAVAILABLE


def test_place_call_unavailable_without_voice():
    res = _svc().place_call("+15551234567", "AP123")
    assert isinstance(res, Failure)
    assert res.kind == FailureKind.UNAVAILABLE


def test_send_text_requires_sender_number():
    messaging = EchoMessaging()
    res = _svc(messaging=messaging, number="").send_text("+15551234567", "hi")
    assert res.kind == FailureKind.CONFIGURATION
    assert messaging.sent == []


def test_send_text_rejects_empty_recipient_and_non_text_body():
    messaging = EchoMessaging()
    svc = _svc(messaging=messaging)
    assert svc.send_text("", "hi").kind == FailureKind.INVALID_ARGUMENT
    assert svc.send_text("+15551234567", {"text": "hi"}).kind == FailureKind.INVALID_ARGUMENT
    assert messaging.sent == []


def test_send_text_checks_availability_before_configuration():
    res = _svc(number="").send_text("", None)
    assert res.kind == FailureKind.UNAVAILABLE


def test_send_text_passes_provider_response_through():
    res = _svc(messaging=EchoMessaging()).send_text("+15551234567", "hi")
    assert isinstance(res, Success)
    assert res.provider_response == {"from": "+15550000000", "to": "+15551234567", "text": "hi"}


def test_send_text_is_not_deduplicated():
    messaging = EchoMessaging()
    svc = _svc(messaging=messaging)
    svc.send_text("+15551234567", "hi")
    svc.send_text("+15551234567", "hi")
    assert len(messaging.sent) == 2


def test_place_call_uses_configured_caller_id_by_default():
    voice = EchoVoice()
    res = _svc(voice=voice).place_call("+15551234567", "AP123")
    assert isinstance(res, Success)
    assert voice.calls == [{"from": "+15550000000", "to": "+15551234567", "appRef": "AP123"}]


def test_place_call_explicit_caller_id_wins():
    voice = EchoVoice()
    _svc(voice=voice, number="").place_call("+15551234567", "AP123", caller_id="+15559999999")
    assert voice.calls[0]["from"] == "+15559999999"


def test_place_call_validation_order():
    voice = EchoVoice()
    assert _svc(voice=voice, number="").place_call("+15551234567", "AP123").kind == FailureKind.CONFIGURATION
    assert _svc(voice=voice).place_call("", "AP123").kind == FailureKind.INVALID_ARGUMENT
    assert _svc(voice=voice).place_call("+15551234567", "").kind == FailureKind.INVALID_ARGUMENT
    assert voice.calls == []


def test_place_call_provider_error_is_normalized():
    voice = FailingVoice("boom")
    res = _svc(voice=voice).place_call("+15551234567", "AP123")
    assert isinstance(res, Failure)
    assert res.kind == FailureKind.PROVIDER_ERROR
    assert res.message == "boom"
    assert voice.calls == 1
