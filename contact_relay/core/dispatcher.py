import httpx
import logging
from typing import List
from contact_relay.core.providers import MailProvider
from contact_relay.models.contact import EmailMessage, DeliveryOutcome, DeliveryStatus

logger = logging.getLogger(__name__)


class DeliveryDispatcher:
    """Sends a message through the providers in order, stopping at the first success"""

    def __init__(self, providers: List[MailProvider]):
        self.providers = list(providers)

    async def dispatch(self, client: httpx.AsyncClient, message: EmailMessage) -> DeliveryOutcome:
        attempts = []

        for provider in self.providers:
            attempt = await provider.send(client, message)
            attempts.append(attempt)

            if attempt.succeeded:
                logger.info(f"✅ Contact email delivered via {provider.name} ({attempt.status_code})")
                return DeliveryOutcome(success=True, attempts=attempts)

            if attempt.outcome == DeliveryStatus.SKIPPED:
                logger.warning(f"⏭️ {provider.name} skipped: {attempt.reason}")
            else:
                logger.warning(f"❌ {provider.name} failed: {attempt.reason}")

        outcome = DeliveryOutcome(success=False, attempts=attempts)
        logger.error(f"❌ Contact email not delivered: {outcome.details}")
        return outcome
