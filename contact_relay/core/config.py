from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import List, Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Mail provider credentials
    resend_api_key: Optional[str] = None
    mailchannels_api_key: Optional[str] = None  # MailChannels also accepts anonymous sends from Workers

    # Provider order, comma separated (first = primary)
    mail_providers: str = "resend,mailchannels"

    # Addresses
    contact_email: str = "info@marknate.ch"
    mail_from: str = "onboarding@resend.dev"
    mail_from_name: str = "Marknate Website"
    mailchannels_from: str = "noreply@marknate.ch"
    support_email: str = "info@marknate.ch"

    # Branding used in subject and text banner
    site_name: str = "Marknate"
    site_domain: str = "marknate.ch"

    # reCAPTCHA v3 - gate is disabled while the secret is unset
    recaptcha_secret: Optional[str] = None
    recaptcha_min_score: float = 0.5
    recaptcha_action: str = "contact"

    min_message_length: int = 10
    timezone: str = "Europe/Zurich"

    static_dir: Optional[str] = None
    log_level: str = "INFO"

    @property
    def provider_names(self) -> List[str]:
        """Provider identifiers in delivery order"""
        return [name.strip().lower() for name in self.mail_providers.split(",") if name.strip()]

    @property
    def recaptcha_enabled(self) -> bool:
        return bool(self.recaptcha_secret)


@lru_cache
def get_settings():
    return Settings()
