"""
Contact form models.

ContactSubmission is built from the raw form fields posted by the website
(German field names: vorname, nachname, privacy; `website` is the honeypot).
The remaining models describe validation, bot verification, the composed
email and the delivery attempts made for it.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Mapping, Any
from enum import Enum


# Form field name -> model attribute
FORM_FIELDS = {
    "vorname": "first_name",
    "nachname": "last_name",
    "email": "email",
    "message": "message",
    "website": "honeypot",
    "recaptchaToken": "recaptcha_token",
}


class ContactSubmission(BaseModel):
    """A single contact form submission, trimmed and immutable"""
    model_config = ConfigDict(frozen=True)

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    message: str = ""
    consent_given: bool = False
    honeypot: str = ""
    recaptcha_token: str = ""

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "ContactSubmission":
        """
        Build a submission from posted form fields.

        Missing fields become empty strings, every value is stripped.
        Consent counts as given when the `privacy` field is non-empty.

        Args:
            form: Form data (Starlette FormData, dict from a JSON body, ...)

        Returns:
            ContactSubmission: The normalized submission
        """
        values = {attr: _clean(form.get(field)) for field, attr in FORM_FIELDS.items()}
        values["consent_given"] = bool(_clean(form.get("privacy")))
        return cls(**values)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


def _clean(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "on" if value else ""
    return str(value).strip()


class ValidationResult(BaseModel):
    """Ordered list of user-facing errors; empty means valid"""
    errors: List[str] = []

    @property
    def is_valid(self) -> bool:
        return not self.errors


class BotCheckResult(BaseModel):
    """Outcome of the reCAPTCHA verification"""
    passed: bool
    score: Optional[float] = None
    reason: Optional[str] = None


class EmailMessage(BaseModel):
    """Provider-neutral notification email"""
    model_config = ConfigDict(frozen=True)

    subject: str
    text: str
    html: str
    sender_email: str
    sender_name: str
    recipient: str
    reply_to_email: str
    reply_to_name: str


class DeliveryStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"  # provider not called, credential missing


class DeliveryAttempt(BaseModel):
    """Result of handing the message to one provider"""
    provider: str
    outcome: DeliveryStatus
    reason: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == DeliveryStatus.SUCCESS


class DeliveryOutcome(BaseModel):
    """Aggregate of all attempts made for one message"""
    success: bool
    attempts: List[DeliveryAttempt] = Field(default_factory=list)

    @property
    def details(self) -> Optional[str]:
        reasons = [a.reason for a in self.attempts if not a.succeeded and a.reason]
        return " | ".join(reasons) if reasons else None

    @property
    def all_skipped(self) -> bool:
        """True when no provider was actually called"""
        return bool(self.attempts) and all(a.outcome == DeliveryStatus.SKIPPED for a in self.attempts)


class ApiResponse(BaseModel):
    """JSON envelope returned to the website"""
    success: bool
    message: str
    details: Optional[str] = None
