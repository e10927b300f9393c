import sys

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ─── App ──────────────────────────────────────
    environment: str = "development"
    api_log_level: str = "info"
    domain: str = "localhost"

    # ─── Auth ─────────────────────────────────────
    # Bearer key expected by the job trigger endpoints (the Supabase service role key)
    service_key: str = "CHANGE_ME"

    # ─── Database ─────────────────────────────────
    database_url: str = "postgresql://postgres:password@db:5432/postgres"

    # ─── Redis ────────────────────────────────────
    redis_url: str = "redis://redis:6379/0"
    rate_limit_storage_uri: str = "memory://"

    # ─── Rent reminders ───────────────────────────
    timezone: str = "America/Toronto"
    rent_grace_days: int = 5
    currency: str = "CAD"
    brand_name: str = "RentFlow"

    # ─── Twilio (SMS) ─────────────────────────────
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_phone_number: str = ""
    twilio_api_url: str = "https://api.twilio.com/2010-04-01"

    # ─── Resend (email) ───────────────────────────
    resend_api_key: str = ""
    resend_api_url: str = "https://api.resend.com"
    email_from: str = "RentFlow <reminders@resend.dev>"

    notification_timeout_seconds: float = 10.0

    # Look for .env in current dir (Docker) or parent dir (local dev from api/)
    model_config = {"env_file": [".env", "../.env"], "extra": "ignore"}


def _validate_secrets(s: Settings) -> None:
    """Abort startup if the trigger key is missing in production."""
    errors: list[str] = []

    if s.service_key in ("CHANGE_ME", ""):
        errors.append("SERVICE_KEY is not set or uses the default placeholder")

    if errors:
        if s.environment == "production":
            print("FATAL: Invalid secrets configuration:", file=sys.stderr)
            for e in errors:
                print(f"  - {e}", file=sys.stderr)
            sys.exit(1)
        else:
            import logging
            log = logging.getLogger("rentflow.config")
            for e in errors:
                log.warning("SECRET VALIDATION WARNING: %s", e)


settings = Settings()
_validate_secrets(settings)
