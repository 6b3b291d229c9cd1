"""Outbound email over SMTP.

The authentication flow only sees the `Notifier` protocol; SMTPNotifier is
the production adapter.
"""

import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional, Protocol

import structlog

from app.config import Settings

logger = structlog.get_logger(__name__)


class NotificationError(Exception):
    """The message could not be handed to the mail transport."""


class Notifier(Protocol):
    def send(
        self,
        to_address: str,
        to_name: Optional[str],
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
    ) -> None:
        ...


class SMTPNotifier:
    """Send one message per SMTP session (STARTTLS + login when configured)."""

    def __init__(self, settings: Settings):
        self.host = settings.SMTP_SERVER
        self.port = settings.SMTP_PORT
        self.username = settings.SMTP_USERNAME
        self.password = settings.SMTP_PASSWORD
        self.use_tls = settings.SMTP_USE_TLS
        self.timeout = settings.SMTP_TIMEOUT_SECONDS
        self.sender = formataddr((settings.FROM_NAME, settings.FROM_EMAIL))

    def build_message(
        self,
        to_address: str,
        to_name: Optional[str],
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
    ) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = formataddr((to_name, to_address)) if to_name else to_address
        message["Subject"] = subject
        if text_body:
            message.set_content(text_body)
            message.add_alternative(html_body, subtype="html")
        else:
            message.set_content(html_body, subtype="html")
        return message

    def send(
        self,
        to_address: str,
        to_name: Optional[str],
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
    ) -> None:
        message = self.build_message(to_address, to_name, subject, html_body, text_body)
        logger.info("Sending email", to=to_address, subject=subject)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as conn:
                if self.use_tls:
                    conn.starttls()
                if self.username:
                    conn.login(self.username, self.password)
                conn.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Email delivery failed", to=to_address, error=str(exc))
            raise NotificationError(str(exc)) from exc
        logger.info("Email sent", to=to_address)
