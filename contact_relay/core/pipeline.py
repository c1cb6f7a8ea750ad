"""
Contact request pipeline.

Flow per submission:
1. Honeypot check - bots get the regular success response, nothing is sent
2. Field validation - all errors are returned together (422)
3. reCAPTCHA v3 gate, only when RECAPTCHA_SECRET is configured (422)
4. Compose plain-text and HTML email
5. Deliver through the configured providers in order, first success wins
6. Map the outcome to a JSON response

The pipeline is built once at startup and holds no per-request state.
"""

import httpx
import logging
from datetime import datetime
from typing import Callable, List, Optional
from zoneinfo import ZoneInfo
from fastapi.responses import JSONResponse
from contact_relay.core.config import Settings
from contact_relay.core.composer import MessageComposer
from contact_relay.core.dispatcher import DeliveryDispatcher
from contact_relay.core.providers import MailProvider, build_providers
from contact_relay.core.recaptcha import RecaptchaVerifier
from contact_relay.core.responses import ResponseBuilder
from contact_relay.core.validation import is_spam, validate_submission
from contact_relay.models.contact import ContactSubmission

logger = logging.getLogger(__name__)


class ContactPipeline:
    """
    Validates a submission and relays it as an email.

    Args:
        settings: Application settings
        providers: Provider adapters in delivery order (built from settings when omitted)
        transport: Optional httpx transport, used to stub the outbound APIs
        clock: Returns the submission timestamp (defaults to now in the configured timezone)
    """

    def __init__(self, settings: Settings, providers: Optional[List[MailProvider]] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.settings = settings
        self.transport = transport
        self.timezone = ZoneInfo(settings.timezone)
        self.clock = clock or (lambda: datetime.now(self.timezone))

        self.dispatcher = DeliveryDispatcher(providers if providers is not None else build_providers(settings))
        self.composer = MessageComposer(
            site_name=settings.site_name,
            site_domain=settings.site_domain,
            recipient=settings.contact_email,
            sender_email=settings.mail_from,
            sender_name=settings.mail_from_name,
        )
        self.responses = ResponseBuilder(settings.support_email)

        self.verifier = None
        if settings.recaptcha_enabled:
            self.verifier = RecaptchaVerifier(
                secret=settings.recaptcha_secret,
                min_score=settings.recaptcha_min_score,
                expected_action=settings.recaptcha_action,
            )

    @property
    def providers(self) -> List[MailProvider]:
        return self.dispatcher.providers

    async def handle(self, submission: ContactSubmission, client_ip: Optional[str] = None) -> JSONResponse:
        """
        Run one submission through the pipeline.

        Provider and network errors are turned into responses here; anything
        else propagates to the endpoint's catch-all.

        Args:
            submission: Normalized form submission
            client_ip: Submitter IP, used for reCAPTCHA and shown in the email

        Returns:
            JSONResponse: Envelope with CORS headers
        """
        if is_spam(submission):
            logger.info(f"🍯 Honeypot filled, pretending success (ip: {client_ip or 'unknown'})")
            return self.responses.success()

        validation = validate_submission(submission, self.settings.min_message_length)
        if not validation.is_valid:
            logger.info(f"Contact submission rejected with {len(validation.errors)} validation error(s)")
            return self.responses.validation_failed(validation)

        async with httpx.AsyncClient(transport=self.transport) as client:
            bot_score = None
            if self.verifier is not None:
                check = await self.verifier.verify(client, submission.recaptcha_token, client_ip)
                if not check.passed:
                    logger.warning(f"⚠️ Contact submission blocked by reCAPTCHA: {check.reason}")
                    return self.responses.bot_rejected(check)
                bot_score = check.score

            message = self.composer.compose(submission, self.clock(), client_ip, bot_score)
            outcome = await self.dispatcher.dispatch(client, message)

        if outcome.success:
            return self.responses.success()
        return self.responses.delivery_failed(outcome)
