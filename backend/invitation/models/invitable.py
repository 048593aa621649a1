"""Polymorphic target of an invite.

Any mapped class that mixes in :class:`Invitable` is registered under its class
name, which is what ``Invite.invitable_type`` stores.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from .user import User


class UnknownInvitableError(LookupError):
    """Raised when an invitable type name has no registered model."""


class Invitable:
    """Mixin for resources that users can be invited into."""

    _invitable_types: ClassVar[dict[str, type]] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        Invitable._invitable_types[cls.__name__] = cls

    @classmethod
    def resolve_type(cls, type_name: str) -> type:
        try:
            return Invitable._invitable_types[type_name]
        except KeyError:
            raise UnknownInvitableError(f"Unknown invitable type: {type_name!r}") from None

    @property
    def invitable_name(self) -> str:
        return getattr(self, "name", None) or type(self).__name__

    def add_invited_user(self, user: "User") -> None:
        """Grant ``user`` access to this resource. Must be idempotent."""
        raise NotImplementedError
