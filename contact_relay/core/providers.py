"""
Transactional mail provider adapters.

Every adapter exposes the same capability, `send(client, message)`, and
returns a DeliveryAttempt instead of raising. HTTP error bodies and
transport exceptions are reduced to a short sanitized reason that only ever
ends up in the diagnostic `details` field.

Supported providers:
- resend: https://resend.com (API key required)
- mailchannels: https://mailchannels.com (anonymous from Cloudflare Workers,
  API key optional)
"""

import httpx
import logging
import re
from typing import Dict, Any, List, Optional
from contact_relay.core.config import Settings
from contact_relay.models.contact import EmailMessage, DeliveryAttempt, DeliveryStatus

logger = logging.getLogger(__name__)

MAX_REASON_LENGTH = 220
_WHITESPACE_RE = re.compile(r"\s+")


def sanitize_error_text(text: Optional[str]) -> str:
    """Collapse whitespace and cut provider output down to a short excerpt"""
    return _WHITESPACE_RE.sub(" ", str(text or "")).strip()[:MAX_REASON_LENGTH]


class MailProvider:
    """Base class for mail provider adapters"""

    name = "provider"
    label = "Provider"
    url = ""
    credential_env: Optional[str] = None

    @property
    def configured(self) -> bool:
        return True

    def build_payload(self, message: EmailMessage) -> Dict[str, Any]:
        raise NotImplementedError

    def build_headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    async def send(self, client: httpx.AsyncClient, message: EmailMessage) -> DeliveryAttempt:
        """
        Hand a message to the provider.

        Args:
            client: Shared HTTP client of the current request
            message: Composed notification email

        Returns:
            DeliveryAttempt: success on any 2xx, failure otherwise,
            skipped when the provider's credential is missing
        """
        if not self.configured:
            return DeliveryAttempt(
                provider=self.name,
                outcome=DeliveryStatus.SKIPPED,
                reason=f"{self.credential_env} ist nicht gesetzt.",
            )

        try:
            response = await client.post(self.url, json=self.build_payload(message), headers=self.build_headers())
        except httpx.HTTPError as e:
            return DeliveryAttempt(
                provider=self.name,
                outcome=DeliveryStatus.FAILURE,
                reason=f"{self.label} Netzwerkfehler: {sanitize_error_text(str(e)) or type(e).__name__}",
            )

        if response.is_success:
            return DeliveryAttempt(provider=self.name, outcome=DeliveryStatus.SUCCESS, status_code=response.status_code)

        return DeliveryAttempt(
            provider=self.name,
            outcome=DeliveryStatus.FAILURE,
            status_code=response.status_code,
            reason=f"{self.label} {response.status_code}: {sanitize_error_text(response.text)}",
        )


class ResendProvider(MailProvider):
    """Resend email API, bearer token auth"""

    name = "resend"
    label = "Resend"
    url = "https://api.resend.com/emails"
    credential_env = "RESEND_API_KEY"

    def __init__(self, api_key: Optional[str]):
        self.api_key = (api_key or "").strip()

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def build_headers(self) -> Dict[str, str]:
        headers = super().build_headers()
        headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def build_payload(self, message: EmailMessage) -> Dict[str, Any]:
        return {
            "from": f"{message.sender_name} <{message.sender_email}>",
            "to": [message.recipient],
            "reply_to": message.reply_to_email,
            "subject": message.subject,
            "text": message.text,
            "html": message.html,
        }


class MailChannelsProvider(MailProvider):
    """MailChannels transactional API, answers 202 Accepted"""

    name = "mailchannels"
    label = "MailChannels"
    url = "https://api.mailchannels.net/tx/v1/send"

    def __init__(self, sender_email: str, api_key: Optional[str] = None):
        self.sender_email = sender_email
        self.api_key = (api_key or "").strip()

    def build_headers(self) -> Dict[str, str]:
        headers = super().build_headers()
        if self.api_key:
            headers["X-Api-Key"] = self.api_key
        return headers

    def build_payload(self, message: EmailMessage) -> Dict[str, Any]:
        # MailChannels only relays for domain-verified senders, so the
        # configured MailChannels address replaces message.sender_email
        return {
            "personalizations": [{"to": [{"email": message.recipient}]}],
            "from": {"email": self.sender_email, "name": message.sender_name},
            "reply_to": {"email": message.reply_to_email, "name": message.reply_to_name},
            "subject": message.subject,
            "content": [
                {"type": "text/plain", "value": message.text},
                {"type": "text/html", "value": message.html},
            ],
        }


def build_providers(settings: Settings) -> List[MailProvider]:
    """
    Create provider adapters in configured delivery order.

    Unknown names and an empty list are configuration errors and raise at
    startup. Missing credentials are only logged: the adapter stays in the
    list and reports itself as skipped at send time.

    Args:
        settings: Application settings

    Returns:
        list: Provider adapters, primary first
    """
    factories = {
        ResendProvider.name: lambda: ResendProvider(settings.resend_api_key),
        MailChannelsProvider.name: lambda: MailChannelsProvider(
            settings.mailchannels_from, settings.mailchannels_api_key
        ),
    }

    providers = []
    for name in settings.provider_names:
        if name not in factories:
            raise ValueError(f"Unknown mail provider '{name}'. Supported: {', '.join(sorted(factories))}")
        if any(p.name == name for p in providers):
            continue
        provider = factories[name]()
        if not provider.configured:
            logger.warning(f"⚠️ Mail provider '{name}' has no credential ({provider.credential_env}) and will be skipped")
        providers.append(provider)

    if not providers:
        raise ValueError("No mail provider configured. Set MAIL_PROVIDERS, e.g. 'resend,mailchannels'.")

    logger.info(f"Mail providers in order: {', '.join(p.name for p in providers)}")
    return providers
