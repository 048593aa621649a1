"""Batch invite processing.

``InviteBatchProcessor`` saves a batch of invites in one transaction, emails
each recipient and grants existing users access straight away. Invites that
cannot be saved are reported back by email address; everything else about
delivery is best-effort and invisible to the caller.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional, Sequence

from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models.invitable import Invitable
from ...models.invite import Invite, InviteValidationError, normalize_email
from ...models.user import User
from ...platform.config import InviteDeliveryPolicy, settings
from ...platform.request_context import reset_invite_batch_id, set_invite_batch_id
from ..notifications.mailer import DefaultInviteMailer, DeliveryMode, InviteMailer, Message

logger = logging.getLogger(__name__)

InviteHook = Callable[[Invite], None]


class InviteClaimError(ValueError):
    """Raised when an invite token cannot be redeemed."""


def grant_invitable_access(invite: Invite) -> None:
    """Add the invite's recipient to the invitable resource."""
    invite.invitable.add_invited_user(invite.recipient)


def deliver_email(message: Message) -> DeliveryMode:
    if message.delivery_mode is DeliveryMode.DEFERRED:
        message.deliver_later()
    else:
        message.deliver_now()
    return message.delivery_mode


class InviteBatchProcessor:
    """Persist, notify and grant access for a batch of invites.

    Args:
        db: Session the batch runs in. ``send_invites`` commits it.
        invites: Invites in the order they should be processed.
        mailer: Builds the existing-user and new-user messages.
        on_existing_user: Runs after an existing user is notified.
            Defaults to granting access to the invitable.
        on_new_user: Runs after a new user is notified. Defaults to nothing.
        delivery_policy: Whether messages go out as they are built or only
            once the batch has committed.
    """

    def __init__(
        self,
        db: Session,
        invites: Sequence[Invite],
        mailer: Optional[InviteMailer] = None,
        on_existing_user: Optional[InviteHook] = None,
        on_new_user: Optional[InviteHook] = None,
        delivery_policy: Optional[InviteDeliveryPolicy] = None,
    ):
        self.db = db
        self.invites = list(invites)
        self.mailer = mailer if mailer is not None else DefaultInviteMailer()
        self.on_existing_user = on_existing_user if on_existing_user is not None else grant_invitable_access
        self.on_new_user = on_new_user
        self.delivery_policy = InviteDeliveryPolicy(delivery_policy or settings.INVITE_DELIVERY_POLICY)
        self.failures: list[str] = []
        self.resave_failures: list[str] = []
        self._outbox: list[Message] = []

    def send_invites(self) -> list[str]:
        """Process every invite and return the emails that could not be saved."""
        self.failures = []
        self.resave_failures = []
        self._outbox = []
        batch_token = set_invite_batch_id(uuid.uuid4().hex[:12])
        try:
            try:
                for invite in self.invites:
                    if self._persist(invite):
                        self.do_invite(invite)
                    else:
                        self.failures.append(invite.email)
                self.db.commit()
            except Exception:
                logger.exception("Invite batch aborted; rolling back %d invites", len(self.invites))
                self.db.rollback()
                self._outbox = []
                raise
            self._flush_outbox()
            logger.info(
                "Invite batch processed: total=%d failed=%d resave_failed=%d",
                len(self.invites),
                len(self.failures),
                len(self.resave_failures),
            )
            return self.failures
        finally:
            reset_invite_batch_id(batch_token)

    def do_invite(self, invite: Invite) -> None:
        if invite.existing_user:
            self._send(self.mailer.existing_user(invite))
            self.after_invite_existing_user(invite)
            invite.accepted_at = datetime.now(timezone.utc)
            if not self._resave(invite):
                # Access was granted already; the record just isn't marked.
                self.resave_failures.append(invite.email)
                logger.warning("Invite %s granted access but could not be re-saved", invite.email)
        else:
            self._send(self.mailer.new_user(invite))
            self.after_invite_new_user(invite)

    def after_invite_existing_user(self, invite: Invite) -> None:
        self.on_existing_user(invite)

    def after_invite_new_user(self, invite: Invite) -> None:
        if self.on_new_user is not None:
            self.on_new_user(invite)

    def _persist(self, invite: Invite) -> bool:
        try:
            invite.validate()
            with self.db.begin_nested():
                self.db.add(invite)
        except InviteValidationError as exc:
            logger.info("Invite to %r not saved: %s", invite.email, exc)
            return False
        except IntegrityError as exc:
            logger.info("Invite to %r not saved: %s", invite.email, exc.orig)
            return False
        return True

    def _resave(self, invite: Invite) -> bool:
        """Save changes made to an invite after its first save.

        The invite's unsaved changes are set aside while everything else
        (the access grant) is flushed, then replayed inside a savepoint. A
        failure rolls back only that savepoint and leaves the invite as it
        was last saved.
        """
        changes = {attr.key: attr.value for attr in inspect(invite).attrs if attr.history.has_changes()}
        if changes:
            self.db.expire(invite, list(changes))
        self.db.flush()
        try:
            with self.db.begin_nested():
                for key, value in changes.items():
                    setattr(invite, key, value)
                invite.validate()
        except InviteValidationError as exc:
            logger.info("Invite to %r not re-saved: %s", invite.email, exc)
            return False
        except IntegrityError as exc:
            logger.info("Invite to %r not re-saved: %s", invite.email, exc.orig)
            return False
        return True

    def _send(self, message: Message) -> None:
        if self.delivery_policy is InviteDeliveryPolicy.IN_TRANSACTION:
            deliver_email(message)
        else:
            self._outbox.append(message)

    def _flush_outbox(self) -> None:
        pending, self._outbox = self._outbox, []
        for message in pending:
            deliver_email(message)


def build_invites(
    db: Session,
    invitable: Invitable,
    emails: Iterable[str],
    sender: Optional[User] = None,
) -> list[Invite]:
    """Build unsaved invites, one per distinct email, in the order given.

    Emails that already belong to an account get that user as recipient.
    Blank or malformed emails are kept so the batch can report them.
    """
    seen: set[str] = set()
    invites: list[Invite] = []
    for raw in emails:
        email = normalize_email(raw)
        if email and email in seen:
            continue
        seen.add(email)
        recipient = db.query(User).filter(User.email == email).first() if email else None
        invites.append(Invite(email=email, invitable=invitable, sender=sender, recipient=recipient))
    return invites


def claim_invite(db: Session, token: str, user: User) -> Invite:
    """Redeem a new-user invite token for a freshly registered ``user``."""
    invite = db.query(Invite).filter(Invite.token == token).first()
    if invite is None:
        raise InviteClaimError("Invite not found")
    if invite.is_accepted:
        raise InviteClaimError("Invite has already been accepted")
    invitable = invite.invitable
    if invitable is None:
        raise InviteClaimError("Invited resource no longer exists")

    invite.recipient = user
    invitable.add_invited_user(user)
    invite.accepted_at = datetime.now(timezone.utc)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(invite)
    logger.info("Invite %s claimed by user %s", invite.id, user.id)
    return invite
