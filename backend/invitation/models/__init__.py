from .invitable import Invitable, UnknownInvitableError
from .organization import Organization, organization_memberships
from .user import User
from .invite import Invite, InviteValidationError, normalize_email

__all__ = [
    "Invitable",
    "UnknownInvitableError",
    "Organization",
    "organization_memberships",
    "User",
    "Invite",
    "InviteValidationError",
    "normalize_email",
]
