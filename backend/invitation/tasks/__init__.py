from .celery_app import celery_app
from .email_tasks import send_invite_email

__all__ = [
    "celery_app",
    "send_invite_email",
]
