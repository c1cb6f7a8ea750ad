"""
Maps pipeline outcomes to JSON envelopes and HTTP status codes.

All user-facing texts live here and are German, matching the website.
Provider and runtime error text only ever goes into `details`.
"""

from fastapi import Response
from fastapi.responses import JSONResponse, PlainTextResponse
from typing import Optional
from contact_relay.models.contact import ApiResponse, ValidationResult, BotCheckResult, DeliveryOutcome
from contact_relay.core.providers import sanitize_error_text

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Accept",
}

ALLOWED_METHODS = "OPTIONS, POST"
JSON_MEDIA_TYPE = "application/json; charset=utf-8"

MESSAGE_SUCCESS = "Vielen Dank! Ihre Nachricht wurde erfolgreich gesendet. Ich melde mich in Kürze bei Ihnen."
MESSAGE_BOT_REJECTED = "Die Spam-Prüfung ist fehlgeschlagen. Bitte laden Sie die Seite neu und versuchen Sie es erneut."


class ResponseBuilder:
    """
    Builds the contact endpoint's responses.

    Args:
        support_email: Address users are pointed to when sending fails
    """

    def __init__(self, support_email: str):
        self.support_email = support_email

    @property
    def message_unavailable(self) -> str:
        return f"E-Mail-Versand ist momentan nicht verfügbar. Bitte schreiben Sie direkt an {self.support_email}."

    @property
    def message_delivery_failed(self) -> str:
        return (
            "E-Mail-Versand fehlgeschlagen. Bitte versuchen Sie es später erneut "
            f"oder schreiben Sie direkt an {self.support_email}."
        )

    @property
    def message_runtime_error(self) -> str:
        return (
            "Es gab einen Fehler beim Senden. Bitte versuchen Sie es erneut "
            f"oder schreiben Sie direkt an {self.support_email}."
        )

    def success(self) -> JSONResponse:
        # Honeypot hits get exactly this response as well
        return json_response(ApiResponse(success=True, message=MESSAGE_SUCCESS), 200)

    def validation_failed(self, result: ValidationResult) -> JSONResponse:
        return json_response(
            ApiResponse(success=False, message=" ".join(result.errors)),
            422,
        )

    def bot_rejected(self, check: BotCheckResult) -> JSONResponse:
        return json_response(
            ApiResponse(success=False, message=MESSAGE_BOT_REJECTED, details=check.reason),
            422,
        )

    def delivery_failed(self, outcome: DeliveryOutcome) -> JSONResponse:
        message = self.message_unavailable if outcome.all_skipped else self.message_delivery_failed
        return json_response(
            ApiResponse(success=False, message=message, details=outcome.details),
            500,
        )

    def runtime_error(self, error: Exception) -> JSONResponse:
        return json_response(
            ApiResponse(
                success=False,
                message=self.message_runtime_error,
                details=f"Runtime: {sanitize_error_text(str(error)) or type(error).__name__}",
            ),
            500,
        )


def json_response(payload: ApiResponse, status_code: int, headers: Optional[dict] = None) -> JSONResponse:
    """Serialize an envelope, dropping `details` when unset, with CORS headers"""
    return JSONResponse(
        content=payload.model_dump(exclude_none=True),
        status_code=status_code,
        headers={**CORS_HEADERS, **(headers or {})},
        media_type=JSON_MEDIA_TYPE,
    )


def preflight_response() -> Response:
    return Response(status_code=204, headers=dict(CORS_HEADERS))


def method_not_allowed_response() -> PlainTextResponse:
    return PlainTextResponse(
        "Method Not Allowed",
        status_code=405,
        headers={**CORS_HEADERS, "Allow": ALLOWED_METHODS},
    )
