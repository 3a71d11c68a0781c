from __future__ import annotations

from types import SimpleNamespace

from config.settings import Settings


def make_settings(**overrides) -> Settings:
    values = {"PROVIDER_ACCESS_KEY_ID": "", "PROVIDER_NUMBER": "+15550000000", "LOG_LEVEL": "WARNING"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class EchoMessaging:
    def __init__(self):
        self.sent = []

    def send_sms(self, payload):
        self.sent.append(payload)
        return dict(payload)


class EchoVoice:
    def __init__(self):
        self.calls = []

    def create_call(self, payload):
        self.calls.append(payload)
        return dict(payload)


class FailingVoice:
    def __init__(self, message="provider exploded: secret-account-detail"):
        self.message = message
        self.calls = 0

    def create_call(self, payload):
        self.calls += 1
        raise RuntimeError(self.message)


class FakeMessages:
    def __init__(self):
        self.created = []

    def create(self, **kw):
        self.created.append(kw)
        return SimpleNamespace(sid="SM123", status="queued", to=kw["to"], from_=kw["from_"], num_segments="1", date_created=None)


class FakeCalls:
    def __init__(self):
        self.created = []

    def create(self, **kw):
        self.created.append(kw)
        return SimpleNamespace(sid="CA123", status="queued", to=kw["to"], from_=kw["from_"], date_created=None)


class FakeClient:
    instances = []

    def __init__(self, username, password=None, **kwargs):
        self.username = username
        self.password = password
        self.kwargs = kwargs
        self.messages = FakeMessages()
        self.calls = FakeCalls()
        FakeClient.instances.append(self)
