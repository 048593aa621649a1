"""Invite mailer: builds the notification for each kind of invite.

A mailer only builds messages. Each message carries the :class:`DeliveryMode`
it was built with, and the invite batch decides when to hand it over.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ...platform.brand import BRAND_NAME
from ...platform.config import settings
from ...platform.request_context import get_request_id
from .service import send_invite_email_sync
from .templates import existing_user_invite_html, new_user_invite_html

if TYPE_CHECKING:
    from ...models.invite import Invite

logger = logging.getLogger(__name__)


class DeliveryMode(str, Enum):
    DEFERRED = "deferred"
    IMMEDIATE = "immediate"


@runtime_checkable
class Message(Protocol):
    delivery_mode: DeliveryMode

    def deliver_now(self) -> None: ...

    def deliver_later(self) -> None: ...


class InviteMailer(Protocol):
    def existing_user(self, invite: "Invite") -> Message: ...

    def new_user(self, invite: "Invite") -> Message: ...


@dataclass
class InviteEmail:
    """A rendered invite email, sent through Resend or queued on Celery."""

    to_email: str
    subject: str
    html: str
    delivery_mode: DeliveryMode = DeliveryMode.IMMEDIATE
    invite_id: int | None = None

    def deliver_now(self) -> None:
        send_invite_email_sync(to_email=self.to_email, subject=self.subject, html=self.html)

    def deliver_later(self) -> None:
        from ...tasks.email_tasks import send_invite_email

        logger.debug("Queueing invite email to %s (invite_id=%s)", self.to_email, self.invite_id)
        send_invite_email.delay(
            to_email=self.to_email,
            subject=self.subject,
            html=self.html,
            invite_id=self.invite_id,
            request_id=get_request_id(),
        )


def resolve_delivery_mode() -> DeliveryMode:
    return DeliveryMode.DEFERRED if settings.deferred_delivery_enabled else DeliveryMode.IMMEDIATE


def _sender_name(invite: "Invite") -> str:
    sender = invite.sender
    if sender is None:
        return f"Someone on {BRAND_NAME}"
    return sender.full_name or sender.email


class DefaultInviteMailer:
    """Mailer used when the caller does not inject one."""

    def __init__(self, frontend_url: str | None = None, delivery_mode: DeliveryMode | None = None):
        self.frontend_url = (frontend_url or settings.FRONTEND_URL).rstrip("/")
        self.delivery_mode = delivery_mode

    def _mode(self) -> DeliveryMode:
        return self.delivery_mode or resolve_delivery_mode()

    def existing_user(self, invite: "Invite") -> InviteEmail:
        invitable_name = invite.invitable.invitable_name if invite.invitable else "your team"
        recipient = invite.recipient
        html = existing_user_invite_html(
            recipient_name=(recipient.full_name if recipient else None) or invite.email,
            invitable_name=invitable_name,
            sender_name=_sender_name(invite),
            link=f"{self.frontend_url}/login",
        )
        return InviteEmail(
            to_email=invite.email,
            subject=f"You've been added to {invitable_name}",
            html=html,
            delivery_mode=self._mode(),
            invite_id=invite.id,
        )

    def new_user(self, invite: "Invite") -> InviteEmail:
        invitable_name = invite.invitable.invitable_name if invite.invitable else "a team"
        html = new_user_invite_html(
            invitable_name=invitable_name,
            sender_name=_sender_name(invite),
            link=f"{self.frontend_url}/register?invite_token={invite.token}",
        )
        return InviteEmail(
            to_email=invite.email,
            subject=f"You're invited to join {invitable_name} on {BRAND_NAME}",
            html=html,
            delivery_mode=self._mode(),
            invite_id=invite.id,
        )
