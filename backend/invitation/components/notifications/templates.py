"""HTML email templates for invite notifications."""

from html import escape

from ...platform.brand import BRAND_NAME, BRAND_PRODUCT_NAME


def _layout(heading: str, body_html: str, button_label: str, link: str, footer: str) -> str:
    return f"""\
<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><meta name="viewport" content="width=device-width, initial-scale=1.0"></head>
<body style="margin:0;padding:0;background-color:#f4f4f7;font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,sans-serif;">
  <table width="100%" cellpadding="0" cellspacing="0" style="background-color:#f4f4f7;padding:40px 20px;">
    <tr><td align="center">
      <table width="600" cellpadding="0" cellspacing="0" style="background-color:#ffffff;border-radius:8px;box-shadow:0 2px 8px rgba(0,0,0,0.08);">
        <tr><td style="background-color:#0f766e;padding:32px;text-align:center;">
          <h1 style="margin:0;color:#ffffff;font-size:28px;">{BRAND_NAME}</h1>
          <p style="margin:4px 0 0;color:#ccfbf1;font-size:14px;">{BRAND_PRODUCT_NAME}</p>
        </td></tr>
        <tr><td style="padding:40px;">
          <h2 style="margin:0 0 16px;color:#1f2937;font-size:22px;">{heading}</h2>
          {body_html}
          <table cellpadding="0" cellspacing="0" style="margin:0 auto 24px;"><tr><td style="background-color:#0f766e;border-radius:6px;text-align:center;">
            <a href="{link}" style="display:inline-block;padding:14px 32px;color:#ffffff;font-size:16px;font-weight:600;text-decoration:none;">{button_label}</a>
          </td></tr></table>
          <p style="margin:0 0 8px;color:#9ca3af;font-size:13px;">Or copy this link into your browser:</p>
          <p style="margin:0 0 24px;color:#0f766e;font-size:13px;word-break:break-all;">{link}</p>
          <hr style="border:none;border-top:1px solid #e5e7eb;margin:24px 0;">
          <p style="margin:0;color:#9ca3af;font-size:13px;text-align:center;">{footer}</p>
        </td></tr>
      </table>
    </td></tr>
  </table>
</body>
</html>"""


def existing_user_invite_html(recipient_name: str, invitable_name: str, sender_name: str, link: str) -> str:
    body = (
        '<p style="margin:0 0 24px;color:#4b5563;font-size:16px;line-height:1.6;">'
        f"Hi {escape(recipient_name)}, {escape(sender_name)} has added you to "
        f"<strong>{escape(invitable_name)}</strong>. You already have an account, "
        "so there is nothing else to set up.</p>"
    )
    return _layout(
        heading=f"You now have access to {escape(invitable_name)}",
        body_html=body,
        button_label="Sign in",
        link=link,
        footer=f"This message was sent by {BRAND_NAME} on behalf of {escape(invitable_name)}.",
    )


def new_user_invite_html(invitable_name: str, sender_name: str, link: str) -> str:
    body = (
        '<p style="margin:0 0 24px;color:#4b5563;font-size:16px;line-height:1.6;">'
        f"{escape(sender_name)} has invited you to join <strong>{escape(invitable_name)}</strong> "
        f"on {BRAND_NAME}. Create your account to accept.</p>"
    )
    return _layout(
        heading=f"Join {escape(invitable_name)}",
        body_html=body,
        button_label="Accept invitation",
        link=link,
        footer="If you did not expect this invitation, you can safely ignore this email.",
    )
