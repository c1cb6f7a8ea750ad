from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from typing import List, Optional
import httpx
import logging
import os

from contact_relay.api.api_router import api_router
from contact_relay.core.config import Settings, get_settings
from contact_relay.core.pipeline import ContactPipeline
from contact_relay.core.providers import MailProvider

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None,
               providers: Optional[List[MailProvider]] = None,
               transport: Optional[httpx.AsyncBaseTransport] = None) -> FastAPI:
    """
    Build the contact backend.

    Configuration is checked once here: an unknown provider name fails
    startup, a missing credential only logs a warning.

    Args:
        settings: Settings to use (read from the environment when omitted)
        providers: Provider adapters overriding MAIL_PROVIDERS
        transport: httpx transport for outbound calls, used by tests

    Returns:
        FastAPI: The application
    """
    settings = settings or get_settings()

    app = FastAPI(title="Contact Form Backend", version="1.0.0")
    app.state.settings = settings
    app.state.pipeline = ContactPipeline(settings, providers=providers, transport=transport)

    if not settings.recaptcha_enabled:
        logger.info("reCAPTCHA gate disabled (RECAPTCHA_SECRET not set)")

    # CORS headers are set per response by the contact routes, preflight included
    app.include_router(api_router)

    # Everything else is the static site
    if settings.static_dir:
        if os.path.isdir(settings.static_dir):
            app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
            logger.info(f"Serving static site from {settings.static_dir}")
        else:
            logger.warning(f"⚠️ STATIC_DIR '{settings.static_dir}' does not exist, static site not served")

    return app
