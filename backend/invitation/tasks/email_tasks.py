"""Celery task for deferred invite email delivery.

Delivery is a single attempt: a failed send is logged and dropped.
"""

import logging

from .celery_app import celery_app
from ..components.notifications.service import send_invite_email_sync
from ..platform.request_context import set_request_id

logger = logging.getLogger(__name__)


@celery_app.task(name="invitation.tasks.send_invite_email")
def send_invite_email(to_email: str, subject: str, html: str, invite_id: int | None = None, request_id: str | None = None):
    """Send one invite email from a worker."""
    if request_id:
        set_request_id(request_id)
    result = send_invite_email_sync(to_email=to_email, subject=subject, html=html)
    if not result["success"]:
        logger.warning("Deferred invite email to %s was not delivered (invite_id=%s)", to_email, invite_id)
    return result
