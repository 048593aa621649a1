"""
Resend email client for invite notifications.

Every send is best-effort: transport errors are logged and reported in the
returned dict, never raised to the invite batch.
"""

import logging

import resend

from ...platform.brand import brand_email_from

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending transactional emails through Resend."""

    def __init__(self, api_key: str, from_email: str = brand_email_from()):
        resend.api_key = api_key
        self.from_email = from_email
        logger.info("EmailService initialised (from=%s)", self.from_email)

    def send_invite(self, to_email: str, subject: str, html: str) -> dict:
        try:
            logger.info("Sending invite email to %s (%s)", to_email, subject)
            email = resend.Emails.send({
                "from": self.from_email,
                "to": [to_email],
                "subject": subject,
                "html": html,
            })
            email_id = email.get("id", "") if isinstance(email, dict) else str(email)
            logger.info("Invite email sent (email_id=%s, to=%s)", email_id, to_email)
            return {"success": True, "email_id": email_id}
        except Exception as exc:
            logger.error("Failed to send invite email to %s: %s", to_email, str(exc))
            return {"success": False, "email_id": ""}
