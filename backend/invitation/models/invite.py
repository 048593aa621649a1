import secrets
from datetime import datetime
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, object_session, relationship

from ..platform.config import settings
from ..platform.database import Base
from .invitable import Invitable


class InviteValidationError(ValueError):
    """Raised when an invite record is not fit to be saved."""


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def generate_invite_token() -> str:
    return secrets.token_hex(settings.INVITE_TOKEN_BYTES)


class Invite(Base):
    """An offer of access to an invitable resource, addressed to an email.

    ``recipient`` is set when the email already belongs to an account. It is
    resolved before the invite is built and is never looked up again on save,
    so :attr:`existing_user` stays fixed for the life of a batch.
    """

    __tablename__ = "invites"
    __table_args__ = (
        UniqueConstraint("email", "invitable_type", "invitable_id", name="uq_invites_email_invitable"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), index=True, nullable=False)
    token: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)
    invitable_type: Mapped[str] = mapped_column(String(100), nullable=False)
    invitable_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    recipient_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    sender_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    accepted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now(), nullable=True
    )

    recipient = relationship("User", foreign_keys=[recipient_id])
    sender = relationship("User", foreign_keys=[sender_id])

    # Not mapped: holds the target passed at construction until it has an id.
    _invitable_obj = None

    @property
    def invitable(self) -> Optional[Invitable]:
        if self._invitable_obj is not None:
            return self._invitable_obj
        if not self.invitable_type or self.invitable_id is None:
            return None
        session = object_session(self)
        if session is None:
            return None
        target = session.get(Invitable.resolve_type(self.invitable_type), self.invitable_id)
        self._invitable_obj = target
        return target

    @invitable.setter
    def invitable(self, value: Optional[Invitable]) -> None:
        self._invitable_obj = value
        if value is None:
            self.invitable_type = None
            self.invitable_id = None
            return
        self.invitable_type = type(value).__name__
        self.invitable_id = getattr(value, "id", None)

    @property
    def existing_user(self) -> bool:
        return self.recipient_id is not None or self.recipient is not None

    @property
    def is_accepted(self) -> bool:
        return self.accepted_at is not None

    def validate(self) -> None:
        """Check the record can be saved, filling in derived columns.

        Raises:
            InviteValidationError: email missing or malformed, or no invitable.
        """
        email = normalize_email(self.email)
        if not email:
            raise InviteValidationError("email can't be blank")
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError as exc:
            raise InviteValidationError(f"email is invalid: {exc}") from exc
        self.email = email

        if self._invitable_obj is not None and self.invitable_id is None:
            self.invitable_id = getattr(self._invitable_obj, "id", None)
        if not self.invitable_type or self.invitable_id is None:
            raise InviteValidationError("invitable can't be blank")

        if not self.token:
            self.token = generate_invite_token()

    def __repr__(self) -> str:
        return (
            f"<Invite id={self.id} email={self.email!r} "
            f"invitable={self.invitable_type}:{self.invitable_id}>"
        )
