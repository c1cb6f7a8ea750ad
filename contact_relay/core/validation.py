"""
Field validation and honeypot detection for contact submissions.
"""

import re
from contact_relay.models.contact import ContactSubmission, ValidationResult

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

ERROR_FIRST_NAME = "Bitte geben Sie Ihren Vornamen ein."
ERROR_LAST_NAME = "Bitte geben Sie Ihren Nachnamen ein."
ERROR_EMAIL = "Bitte geben Sie eine gültige E-Mail-Adresse ein."
ERROR_MESSAGE = "Bitte geben Sie eine Nachricht ein."
ERROR_MESSAGE_TOO_SHORT = "Bitte schreiben Sie eine etwas ausführlichere Nachricht."
ERROR_CONSENT = "Bitte stimmen Sie der Datenschutzerklärung zu."


def is_spam(submission: ContactSubmission) -> bool:
    """Bots fill the hidden `website` field, people never see it"""
    return bool(submission.honeypot)


def is_valid_email(email: str) -> bool:
    return bool(email) and EMAIL_RE.match(email) is not None


def validate_submission(submission: ContactSubmission, min_message_length: int = 10) -> ValidationResult:
    """
    Check every field and collect all errors.

    Rules are not short-circuited, so an empty first name and an invalid
    email produce two errors.

    Args:
        submission: Normalized submission
        min_message_length: Minimum message length, 0 disables the check

    Returns:
        ValidationResult: Errors in form order, empty when valid
    """
    errors = []

    if not submission.first_name:
        errors.append(ERROR_FIRST_NAME)
    if not submission.last_name:
        errors.append(ERROR_LAST_NAME)
    if not is_valid_email(submission.email):
        errors.append(ERROR_EMAIL)
    if not submission.message:
        errors.append(ERROR_MESSAGE)
    elif min_message_length > 0 and len(submission.message) < min_message_length:
        errors.append(ERROR_MESSAGE_TOO_SHORT)
    if not submission.consent_given:
        errors.append(ERROR_CONSENT)

    return ValidationResult(errors=errors)
