"""Tests for the SMTP notifier and email templates."""

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from app.application.services.email_templates import verification_email, verification_link
from app.infrastructure.mailer import NotificationError, SMTPNotifier

pytestmark = pytest.mark.unit


@pytest.fixture
def smtp_notifier(settings) -> SMTPNotifier:
    settings.SMTP_USERNAME = "mailer"
    settings.SMTP_PASSWORD = "pw"
    return SMTPNotifier(settings)


def test_verification_link_carries_code_as_query_parameter():
    assert (
        verification_link("https://portal.example.com/", "abc123")
        == "https://portal.example.com/auth/verify-email?code=abc123"
    )


def test_verification_template_escapes_names():
    template = verification_email("Portal", "<Ada>", "https://x/verify?code=abc")
    assert "&lt;Ada&gt;" in template.html_body
    assert "<Ada>" in template.text_body
    assert "24 hours" in template.text_body


def test_build_message_with_text_is_multipart(smtp_notifier):
    message = smtp_notifier.build_message("a@x.com", "User A", "Hi", "<p>hi</p>", "hi")

    assert message["To"] == "User A <a@x.com>"
    assert message["From"] == "Portal <no-reply@portal.local>"
    assert message.is_multipart()
    assert [part.get_content_type() for part in message.iter_parts()] == ["text/plain", "text/html"]


def test_build_message_html_only(smtp_notifier):
    message = smtp_notifier.build_message("a@x.com", None, "Hi", "<p>hi</p>")
    assert message["To"] == "a@x.com"
    assert message.get_content_type() == "text/html"


def test_send_uses_starttls_and_login(smtp_notifier):
    with patch("app.infrastructure.mailer.smtplib.SMTP") as smtp_cls:
        conn = MagicMock()
        smtp_cls.return_value.__enter__.return_value = conn

        smtp_notifier.send("a@x.com", "User A", "Hi", "<p>hi</p>", "hi")

    smtp_cls.assert_called_once_with("localhost", 587, timeout=10)
    conn.starttls.assert_called_once()
    conn.login.assert_called_once_with("mailer", "pw")
    conn.send_message.assert_called_once()


def test_send_failure_raises_notification_error(smtp_notifier):
    with patch("app.infrastructure.mailer.smtplib.SMTP") as smtp_cls:
        smtp_cls.return_value.__enter__.return_value.send_message.side_effect = (
            smtplib.SMTPRecipientsRefused({"a@x.com": (550, b"no such user")})
        )
        with pytest.raises(NotificationError):
            smtp_notifier.send("a@x.com", "User A", "Hi", "<p>hi</p>")


def test_connection_failure_raises_notification_error(smtp_notifier):
    with patch("app.infrastructure.mailer.smtplib.SMTP", side_effect=ConnectionRefusedError()):
        with pytest.raises(NotificationError):
            smtp_notifier.send("a@x.com", None, "Hi", "<p>hi</p>")
