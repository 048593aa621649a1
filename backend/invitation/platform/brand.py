"""Centralized brand configuration for user-facing copy."""

BRAND_NAME = "Invitation"
BRAND_DOMAIN = "invitation.dev"
BRAND_PRODUCT_NAME = "Team Invitations"
BRAND_APP_DESCRIPTION = "Invite teammates into organizations by email"

def brand_email_from() -> str:
    return f"{BRAND_NAME} <noreply@{BRAND_DOMAIN}>"
