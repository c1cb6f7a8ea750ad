"""
Optional reCAPTCHA v3 gate.

When a secret is configured, every submission that passed field validation
is scored by Google's siteverify endpoint before any email is sent. The
gate never raises: transport problems and unexpected payloads count as a
failed check with a diagnostic reason.
"""

import httpx
import logging
from typing import Optional
from contact_relay.models.contact import BotCheckResult
from contact_relay.core.providers import sanitize_error_text

logger = logging.getLogger(__name__)

SITEVERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"


class RecaptchaVerifier:
    """Scores a reCAPTCHA v3 token for the expected form action"""

    def __init__(self, secret: str, min_score: float = 0.5, expected_action: str = "contact",
                 url: str = SITEVERIFY_URL):
        self.secret = secret
        self.min_score = min_score
        self.expected_action = expected_action
        self.url = url

    async def verify(self, client: httpx.AsyncClient, token: str, remote_ip: Optional[str] = None) -> BotCheckResult:
        """
        Verify a token against the siteverify API.

        Args:
            client: Shared HTTP client of the current request
            token: Token posted by the form (`recaptchaToken`)
            remote_ip: Submitter IP, forwarded when known

        Returns:
            BotCheckResult: passed flag, score (when returned) and failure reason
        """
        if not token:
            logger.warning("⚠️ reCAPTCHA token missing")
            return BotCheckResult(passed=False, reason="reCAPTCHA: Token fehlt.")

        data = {"secret": self.secret, "response": token}
        if remote_ip:
            data["remoteip"] = remote_ip

        try:
            response = await client.post(self.url, data=data)
        except httpx.HTTPError as e:
            logger.error(f"❌ reCAPTCHA verification request failed: {str(e)}")
            return BotCheckResult(passed=False, reason=f"reCAPTCHA Netzwerkfehler: {sanitize_error_text(str(e))}")

        if not response.is_success:
            logger.error(f"❌ reCAPTCHA verification returned {response.status_code}")
            return BotCheckResult(
                passed=False,
                reason=f"reCAPTCHA {response.status_code}: {sanitize_error_text(response.text)}"
            )

        try:
            result = response.json()
        except ValueError:
            return BotCheckResult(passed=False, reason="reCAPTCHA: Antwort ist kein JSON.")
        if not isinstance(result, dict):
            return BotCheckResult(passed=False, reason="reCAPTCHA: Unerwartete Antwort.")

        score = result.get("score")
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            score = None

        if result.get("success") is not True:
            codes = ", ".join(str(c) for c in result.get("error-codes") or []) or "unbekannt"
            logger.warning(f"⚠️ reCAPTCHA rejected token: {codes}")
            return BotCheckResult(passed=False, score=score, reason=f"reCAPTCHA ungültig: {sanitize_error_text(codes)}")

        if score is None:
            return BotCheckResult(passed=False, reason="reCAPTCHA: Kein Score erhalten.")

        if score < self.min_score:
            logger.warning(f"⚠️ reCAPTCHA score {score} below threshold {self.min_score}")
            return BotCheckResult(passed=False, score=score, reason=f"reCAPTCHA Score zu niedrig: {score}")

        action = result.get("action")
        if action != self.expected_action:
            logger.warning(f"⚠️ reCAPTCHA action mismatch: expected '{self.expected_action}', got '{action}'")
            return BotCheckResult(
                passed=False,
                score=score,
                reason=f"reCAPTCHA Aktion stimmt nicht: {sanitize_error_text(str(action))}"
            )

        logger.info(f"✅ reCAPTCHA passed with score {score}")
        return BotCheckResult(passed=True, score=float(score))
