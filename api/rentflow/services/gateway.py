"""
Notification gateway - SMS via Twilio, email via Resend.

Both senders return True on success and False on any failure (missing
credentials, non-2xx response, timeout, transport error).  Failures are
logged and swallowed so one undeliverable message never stops a batch.
"""

import logging
import re

import requests

from rentflow.core.config import Settings

logger = logging.getLogger(__name__)


def format_phone(raw: str) -> str:
    """Normalize a North American phone number to E.164 (+1XXXXXXXXXX)."""
    digits = re.sub(r"\D", "", raw)
    if len(digits) == 10:
        return "+1" + digits
    return "+" + digits


class NotificationGateway:
    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def sms_enabled(self) -> bool:
        s = self.settings
        return bool(s.twilio_account_sid and s.twilio_auth_token and s.twilio_phone_number)

    @property
    def email_enabled(self) -> bool:
        return bool(self.settings.resend_api_key)

    def send_sms(self, to: str, message: str) -> bool:
        if not self.sms_enabled:
            logger.error("Twilio credentials not configured")
            return False
        if not to or not message:
            return False

        s = self.settings
        try:
            resp = requests.post(
                f"{s.twilio_api_url}/Accounts/{s.twilio_account_sid}/Messages.json",
                auth=(s.twilio_account_sid, s.twilio_auth_token),
                data={"To": format_phone(to), "From": s.twilio_phone_number, "Body": message},
                timeout=s.notification_timeout_seconds,
            )
            if resp.ok:
                return True
            logger.warning("Twilio returned %d: %s", resp.status_code, resp.text[:200])
            return False
        except requests.RequestException as exc:
            logger.warning("SMS send failed (to=%s): %s", to, exc)
            return False

    def send_email(self, to: str, subject: str, html: str) -> bool:
        if not self.email_enabled:
            logger.error("Resend API key not configured")
            return False
        if not to:
            return False

        s = self.settings
        try:
            resp = requests.post(
                f"{s.resend_api_url}/emails",
                headers={"Authorization": f"Bearer {s.resend_api_key}"},
                json={"from": s.email_from, "to": to, "subject": subject, "html": html},
                timeout=s.notification_timeout_seconds,
            )
            if resp.ok:
                return True
            logger.warning("Resend returned %d: %s", resp.status_code, resp.text[:200])
            return False
        except requests.RequestException as exc:
            logger.warning("Email send failed (to=%s): %s", to, exc)
            return False
