import asyncio
import json

import httpx
import pytest

from contact_relay.core.dispatcher import DeliveryDispatcher
from contact_relay.core.providers import (
    MailChannelsProvider,
    ResendProvider,
    build_providers,
    sanitize_error_text,
)
from contact_relay.models.contact import DeliveryStatus, EmailMessage
from tests.conftest import MAILCHANNELS_URL, RESEND_URL, make_settings

MESSAGE = EmailMessage(
    subject="[Marknate Kontaktformular] Neue Anfrage von Anna Muster",
    text="Neue Kontaktanfrage",
    html="<p>Neue Kontaktanfrage</p>",
    sender_email="onboarding@resend.dev",
    sender_name="Marknate Website",
    recipient="info@marknate.ch",
    reply_to_email="anna@example.ch",
    reply_to_name="Anna Muster",
)


def send(provider, fake_apis):
    async def run():
        async with httpx.AsyncClient(transport=fake_apis.transport) as client:
            return await provider.send(client, MESSAGE)
    return asyncio.run(run())


def dispatch(providers, fake_apis):
    async def run():
        async with httpx.AsyncClient(transport=fake_apis.transport) as client:
            return await DeliveryDispatcher(providers).dispatch(client, MESSAGE)
    return asyncio.run(run())


def test_sanitize_error_text():
    assert sanitize_error_text("  a\n\tb   c ") == "a b c"
    assert sanitize_error_text(None) == ""
    assert len(sanitize_error_text("x" * 1000)) == 220


def test_resend_payload_and_auth(fake_apis):
    fake_apis.on(RESEND_URL, status=200, json={"id": "abc"})

    attempt = send(ResendProvider("re_key"), fake_apis)

    assert attempt.outcome == DeliveryStatus.SUCCESS
    assert attempt.status_code == 200
    request = fake_apis.requests[0]
    assert request.method == "POST"
    assert request.headers["authorization"] == "Bearer re_key"
    assert json.loads(request.content) == {
        "from": "Marknate Website <onboarding@resend.dev>",
        "to": ["info@marknate.ch"],
        "reply_to": "anna@example.ch",
        "subject": MESSAGE.subject,
        "text": MESSAGE.text,
        "html": MESSAGE.html,
    }


def test_resend_without_key_is_skipped(fake_apis):
    attempt = send(ResendProvider("  "), fake_apis)

    assert attempt.outcome == DeliveryStatus.SKIPPED
    assert attempt.reason == "RESEND_API_KEY ist nicht gesetzt."
    assert fake_apis.requests == []


def test_error_status_becomes_sanitized_reason(fake_apis):
    fake_apis.on(RESEND_URL, status=422, text='{"message":\n  "Invalid `from` field"}')

    attempt = send(ResendProvider("re_key"), fake_apis)

    assert attempt.outcome == DeliveryStatus.FAILURE
    assert attempt.status_code == 422
    assert attempt.reason == 'Resend 422: {"message": "Invalid `from` field"}'


def test_long_error_body_is_truncated(fake_apis):
    fake_apis.on(RESEND_URL, status=500, text="e" * 5000)

    attempt = send(ResendProvider("re_key"), fake_apis)

    assert attempt.reason == "Resend 500: " + "e" * 220


def test_transport_error_is_caught(fake_apis):
    fake_apis.on(MAILCHANNELS_URL, exc=httpx.ReadTimeout)

    attempt = send(MailChannelsProvider("noreply@marknate.ch"), fake_apis)

    assert attempt.outcome == DeliveryStatus.FAILURE
    assert attempt.reason == "MailChannels Netzwerkfehler: fake ReadTimeout"


def test_mailchannels_accepted_is_success(fake_apis):
    fake_apis.on(MAILCHANNELS_URL, status=202)

    attempt = send(MailChannelsProvider("noreply@marknate.ch"), fake_apis)

    assert attempt.succeeded
    request = fake_apis.requests[0]
    assert "authorization" not in request.headers
    assert "x-api-key" not in request.headers
    assert json.loads(request.content)["from"] == {"email": "noreply@marknate.ch", "name": "Marknate Website"}


def test_mailchannels_optional_api_key(fake_apis):
    fake_apis.on(MAILCHANNELS_URL, status=202)

    send(MailChannelsProvider("noreply@marknate.ch", api_key="mc_key"), fake_apis)

    assert fake_apis.requests[0].headers["x-api-key"] == "mc_key"


def test_dispatcher_stops_at_first_success(fake_apis):
    fake_apis.on(RESEND_URL, status=200, json={"id": "abc"})
    fake_apis.on(MAILCHANNELS_URL, status=202)

    outcome = dispatch([ResendProvider("re_key"), MailChannelsProvider("noreply@marknate.ch")], fake_apis)

    assert outcome.success
    assert outcome.details is None
    assert [a.provider for a in outcome.attempts] == ["resend"]
    assert fake_apis.calls_to(MAILCHANNELS_URL) == []


def test_dispatcher_respects_configured_order(fake_apis):
    fake_apis.on(RESEND_URL, status=200, json={"id": "abc"})
    fake_apis.on(MAILCHANNELS_URL, status=202)

    outcome = dispatch([MailChannelsProvider("noreply@marknate.ch"), ResendProvider("re_key")], fake_apis)

    assert [a.provider for a in outcome.attempts] == ["mailchannels"]
    assert fake_apis.calls_to(RESEND_URL) == []


def test_dispatcher_aggregates_failures(fake_apis):
    fake_apis.on(RESEND_URL, status=401, text="unauthorized")
    fake_apis.on(MAILCHANNELS_URL, status=500, text="boom")

    outcome = dispatch([ResendProvider("re_key"), MailChannelsProvider("noreply@marknate.ch")], fake_apis)

    assert not outcome.success
    assert not outcome.all_skipped
    assert outcome.details == "Resend 401: unauthorized | MailChannels 500: boom"


def test_dispatcher_all_skipped(fake_apis):
    outcome = dispatch([ResendProvider(None)], fake_apis)

    assert not outcome.success
    assert outcome.all_skipped
    assert outcome.details == "RESEND_API_KEY ist nicht gesetzt."


def test_build_providers_default_order():
    providers = build_providers(make_settings())

    assert [p.name for p in providers] == ["resend", "mailchannels"]
    assert providers[0].api_key == "re_test_key"
    assert providers[1].sender_email == "noreply@marknate.ch"


def test_build_providers_custom_order_ignores_duplicates():
    providers = build_providers(make_settings(mail_providers=" MailChannels , resend, mailchannels"))

    assert [p.name for p in providers] == ["mailchannels", "resend"]


def test_build_providers_keeps_unconfigured_provider():
    providers = build_providers(make_settings(resend_api_key=None))

    assert providers[0].name == "resend"
    assert providers[0].configured is False


def test_build_providers_rejects_unknown_name():
    with pytest.raises(ValueError, match="Unknown mail provider 'sendgrid'"):
        build_providers(make_settings(mail_providers="resend,sendgrid"))


def test_build_providers_rejects_empty_list():
    with pytest.raises(ValueError, match="No mail provider configured"):
        build_providers(make_settings(mail_providers=" , "))
