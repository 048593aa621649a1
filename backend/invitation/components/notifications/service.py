"""Synchronous notification helpers (used when Celery is disabled)."""

import logging

from ...platform.config import settings
from .email_client import EmailService

logger = logging.getLogger(__name__)


def send_invite_email_sync(to_email: str, subject: str, html: str) -> dict:
    """Send one invite email inline. A missing Resend key skips the send."""
    if not (settings.RESEND_API_KEY or "").strip():
        logger.info("RESEND_API_KEY not configured; skipping invite email to %s", to_email)
        return {"success": False, "email_id": "", "skipped": True}
    email_svc = EmailService(api_key=settings.RESEND_API_KEY, from_email=settings.EMAIL_FROM)
    return email_svc.send_invite(to_email=to_email, subject=subject, html=html)
