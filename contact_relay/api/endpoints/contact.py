"""
Contact form routes.

The website posts its form to /api/contact; /submit is the older worker
endpoint and behaves identically. Both answer CORS preflights with 204 and
reject every other method with 405.
"""

from fastapi import APIRouter, Request
from typing import Any, Dict, Optional
import logging
from contact_relay.models.contact import ContactSubmission
from contact_relay.core.responses import preflight_response, method_not_allowed_response

router = APIRouter()
logger = logging.getLogger(__name__)


def get_client_ip(request: Request) -> Optional[str]:
    """Cloudflare's connecting IP, else the first forwarded hop, else the peer address"""
    ip = request.headers.get("cf-connecting-ip")
    if ip:
        return ip.strip()

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop

    if request.client:
        return request.client.host
    return None


async def read_form(request: Request) -> Dict[str, Any]:
    """Form-encoded or multipart body; JSON bodies are accepted with the same field names"""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except ValueError:
            # Unparseable body counts as an empty form and fails validation
            logger.warning("⚠️ Contact form sent malformed JSON")
            return {}
        return data if isinstance(data, dict) else {}

    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


@router.post("/api/contact")
@router.post("/submit", include_in_schema=False)
async def submit_contact(request: Request):
    """
    Validate a contact submission and relay it by email.

    Returns:
        JSONResponse: {success, message, details?}
    """
    responses = request.app.state.pipeline.responses

    try:
        submission = ContactSubmission.from_form(await read_form(request))
        client_ip = get_client_ip(request)
        return await request.app.state.pipeline.handle(submission, client_ip)

    except Exception as e:
        logger.error(f"❌ Contact form error: {str(e)}", exc_info=True)
        return responses.runtime_error(e)


@router.options("/api/contact", include_in_schema=False)
@router.options("/submit", include_in_schema=False)
async def contact_preflight():
    """CORS preflight"""
    return preflight_response()


async def contact_method_not_allowed(request: Request):
    return method_not_allowed_response()


# Plain routes without a method list match every method, so anything that is
# not POST or OPTIONS ends here instead of in Starlette's bare 405 or the static mount
router.add_route("/api/contact", contact_method_not_allowed, include_in_schema=False)
router.add_route("/submit", contact_method_not_allowed, include_in_schema=False)
