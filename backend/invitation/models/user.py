from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..platform.database import Base
from .organization import organization_memberships


class User(Base):
    """Account holder. Invites to an existing user's email link back here."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True, nullable=False)
    full_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now(), nullable=True
    )

    organizations = relationship(
        "Organization", secondary=organization_memberships, back_populates="members"
    )
    # Read-only: building an invite must not put it in these collections
    # before it is saved.
    invitations = relationship("Invite", foreign_keys="Invite.recipient_id", viewonly=True)
    sent_invites = relationship("Invite", foreign_keys="Invite.sender_id", viewonly=True)
