import httpx
import pytest
from fastapi.testclient import TestClient

from contact_relay.core.config import Settings
from contact_relay.app_factory import create_app

RESEND_URL = "api.resend.com/emails"
MAILCHANNELS_URL = "api.mailchannels.net/tx/v1/send"
SITEVERIFY_URL = "www.google.com/recaptcha/api/siteverify"


class FakeAPIs:
    """Stands in for the mail and reCAPTCHA APIs and records every outbound request"""

    def __init__(self):
        self.requests = []
        self.routes = {}

    def on(self, url, status=200, json=None, text="", exc=None):
        self.routes[url] = (status, json, text, exc)

    def handler(self, request):
        self.requests.append(request)
        key = f"{request.url.host}{request.url.path}"
        if key not in self.routes:
            return httpx.Response(404, text=f"no fake for {key}")
        status, json, text, exc = self.routes[key]
        if exc is not None:
            raise exc(f"fake {exc.__name__}", request=request)
        if json is not None:
            return httpx.Response(status, json=json)
        return httpx.Response(status, text=text)

    def calls_to(self, url):
        return [r for r in self.requests if f"{r.url.host}{r.url.path}" == url]

    @property
    def transport(self):
        return httpx.MockTransport(self.handler)


def make_settings(**overrides):
    values = dict(
        _env_file=None,
        resend_api_key="re_test_key",
        mailchannels_api_key=None,
        mail_providers="resend,mailchannels",
        recaptcha_secret=None,
        min_message_length=10,
        static_dir=None,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def fake_apis():
    return FakeAPIs()


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def client(settings, fake_apis):
    app = create_app(settings, transport=fake_apis.transport)
    return TestClient(app)


@pytest.fixture
def valid_form():
    return {
        "vorname": "Anna",
        "nachname": "Muster",
        "email": "anna@example.ch",
        "message": "Ich hätte gerne eine Offerte für eine neue Website.",
        "privacy": "on",
        "website": "",
    }
