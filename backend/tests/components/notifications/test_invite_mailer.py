from unittest.mock import MagicMock, patch

from invitation.components.notifications.email_client import EmailService
from invitation.components.notifications.mailer import (
    DefaultInviteMailer,
    DeliveryMode,
    InviteEmail,
    Message,
    resolve_delivery_mode,
)
from invitation.components.notifications.service import send_invite_email_sync
from invitation.models import Invite
from invitation.tasks.email_tasks import send_invite_email
from tests.conftest import build_invite, create_organization, create_user


def _saved(db, invite: Invite) -> Invite:
    invite.validate()
    db.add(invite)
    db.commit()
    return invite


class TestDefaultInviteMailer:

    def test_existing_user_message(self, db):
        org = create_organization(db, name="Acme")
        sender = create_user(db, full_name="Grace Hopper")
        user = create_user(db, email="ada@example.com", full_name="Ada")
        invite = _saved(db, build_invite(org, recipient=user, sender=sender))

        message = DefaultInviteMailer(frontend_url="https://app.example.com/").existing_user(invite)

        assert isinstance(message, Message)
        assert message.to_email == "ada@example.com"
        assert message.subject == "You've been added to Acme"
        assert "Grace Hopper" in message.html
        assert "https://app.example.com/login" in message.html
        assert message.invite_id == invite.id

    def test_new_user_message_links_to_registration_with_token(self, db):
        org = create_organization(db, name="Acme")
        invite = _saved(db, build_invite(org, email="new@example.com"))

        message = DefaultInviteMailer(frontend_url="https://app.example.com").new_user(invite)

        assert message.to_email == "new@example.com"
        assert "Acme" in message.subject
        assert f"https://app.example.com/register?invite_token={invite.token}" in message.html

    def test_escapes_resource_names(self, db):
        org = create_organization(db, name="<script>x</script>")
        invite = _saved(db, build_invite(org, email="new@example.com"))

        message = DefaultInviteMailer().new_user(invite)

        assert "<script>" not in message.html
        assert "&lt;script&gt;" in message.html

    def test_delivery_mode_is_immediate_when_celery_disabled(self, db, monkeypatch):
        monkeypatch.setattr("invitation.components.notifications.mailer.settings.DISABLE_CELERY", True)
        org = create_organization(db)
        invite = _saved(db, build_invite(org))

        assert DefaultInviteMailer().new_user(invite).delivery_mode is DeliveryMode.IMMEDIATE

    def test_delivery_mode_is_deferred_when_celery_enabled(self, db, monkeypatch):
        monkeypatch.setattr("invitation.components.notifications.mailer.settings.DISABLE_CELERY", False)
        org = create_organization(db)
        invite = _saved(db, build_invite(org))

        assert resolve_delivery_mode() is DeliveryMode.DEFERRED
        assert DefaultInviteMailer().new_user(invite).delivery_mode is DeliveryMode.DEFERRED

    def test_explicit_delivery_mode_wins(self, db, monkeypatch):
        monkeypatch.setattr("invitation.components.notifications.mailer.settings.DISABLE_CELERY", False)
        org = create_organization(db)
        invite = _saved(db, build_invite(org))

        mailer = DefaultInviteMailer(delivery_mode=DeliveryMode.IMMEDIATE)

        assert mailer.new_user(invite).delivery_mode is DeliveryMode.IMMEDIATE


class TestInviteEmailDelivery:

    def _email(self, mode=DeliveryMode.IMMEDIATE):
        return InviteEmail(to_email="x@example.com", subject="Hi", html="<p>hi</p>", delivery_mode=mode, invite_id=7)

    def test_deliver_now_sends_inline(self):
        with patch("invitation.components.notifications.mailer.send_invite_email_sync") as send:
            self._email().deliver_now()
        send.assert_called_once_with(to_email="x@example.com", subject="Hi", html="<p>hi</p>")

    def test_deliver_later_enqueues_celery_task(self):
        with patch("invitation.tasks.email_tasks.send_invite_email.delay") as delay:
            self._email(DeliveryMode.DEFERRED).deliver_later()
        delay.assert_called_once()
        kwargs = delay.call_args.kwargs
        assert kwargs["to_email"] == "x@example.com"
        assert kwargs["invite_id"] == 7


class TestSyncSend:

    def test_skips_without_resend_key(self, monkeypatch):
        monkeypatch.setattr("invitation.components.notifications.service.settings.RESEND_API_KEY", "")
        with patch("invitation.components.notifications.service.EmailService") as service:
            result = send_invite_email_sync("x@example.com", "Hi", "<p>hi</p>")
        service.assert_not_called()
        assert result["success"] is False
        assert result["skipped"] is True

    def test_sends_through_resend_when_configured(self, monkeypatch):
        monkeypatch.setattr("invitation.components.notifications.service.settings.RESEND_API_KEY", "re_test")
        with patch("invitation.components.notifications.email_client.resend.Emails.send", return_value={"id": "em_1"}) as send:
            result = send_invite_email_sync("x@example.com", "Hi", "<p>hi</p>")
        assert result == {"success": True, "email_id": "em_1"}
        sent = send.call_args.args[0]
        assert sent["to"] == ["x@example.com"]
        assert sent["subject"] == "Hi"

    def test_transport_errors_are_reported_not_raised(self):
        with patch("invitation.components.notifications.email_client.resend.Emails.send", side_effect=RuntimeError("boom")):
            result = EmailService(api_key="re_test").send_invite("x@example.com", "Hi", "<p>hi</p>")
        assert result == {"success": False, "email_id": ""}


class TestSendInviteEmailTask:

    def test_task_sends_once_and_returns_result(self):
        with patch("invitation.tasks.email_tasks.send_invite_email_sync", return_value={"success": True, "email_id": "em_2"}) as send:
            result = send_invite_email(to_email="x@example.com", subject="Hi", html="<p>hi</p>", invite_id=3)
        send.assert_called_once_with(to_email="x@example.com", subject="Hi", html="<p>hi</p>")
        assert result["email_id"] == "em_2"

    def test_task_does_not_raise_on_failed_send(self):
        failed = {"success": False, "email_id": ""}
        with patch("invitation.tasks.email_tasks.send_invite_email_sync", return_value=failed):
            assert send_invite_email(to_email="x@example.com", subject="Hi", html="<p>hi</p>") == failed
