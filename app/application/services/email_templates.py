"""Pre-rendered emails sent by the authentication flow."""

from dataclasses import dataclass
from html import escape
from typing import Optional
from urllib.parse import urlencode


@dataclass(frozen=True)
class EmailTemplate:
    subject: str
    html_body: str
    text_body: Optional[str] = None


VERIFICATION_HTML = """
<html>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
    <h1 style="color: #333;">Welcome to {app_name}!</h1>
    <h2>Hi {name}!</h2>
    <p>Thank you for registering with {app_name}. To complete your registration, please verify your email address.</p>
    <p style="text-align: center; margin: 30px 0;">
        <a href="{link}" style="background: #667eea; color: white; padding: 14px 28px; text-decoration: none; border-radius: 6px; display: inline-block;">
            Verify Email Address
        </a>
    </p>
    <p style="color: #666; font-size: 14px;">Button not working? Copy this link: <a href="{link}">{link}</a></p>
    <p style="color: #856404; font-size: 14px;">This verification link will expire in {ttl_hours} hours.</p>
    <p style="color: #666; font-size: 14px;">If you didn't create an account with {app_name}, you can ignore this email.</p>
</body>
</html>
"""

VERIFICATION_TEXT = """
Welcome to {app_name}!

Hi {name}!

Thank you for registering with {app_name}. Please verify your email address by visiting:

{link}

This verification link will expire in {ttl_hours} hours.

If you didn't create an account with {app_name}, you can ignore this email.
"""

WELCOME_HTML = """
<html>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
    <h1 style="color: #333;">You're all set, {name}!</h1>
    <p>Your email has been verified. You now have full access to {app_name}.</p>
</body>
</html>
"""

WELCOME_TEXT = """
You're all set, {name}!

Your email has been verified. You now have full access to {app_name}.
"""


def verification_link(base_url: str, code: str) -> str:
    return f"{base_url.rstrip('/')}/auth/verify-email?{urlencode({'code': code})}"


def verification_email(app_name: str, fullname: str, link: str, ttl_hours: int = 24) -> EmailTemplate:
    return EmailTemplate(
        subject=f"Verify your email address - {app_name}",
        html_body=VERIFICATION_HTML.format(
            app_name=escape(app_name), name=escape(fullname), link=escape(link), ttl_hours=ttl_hours
        ),
        text_body=VERIFICATION_TEXT.format(
            app_name=app_name, name=fullname, link=link, ttl_hours=ttl_hours
        ),
    )


def welcome_email(app_name: str, fullname: str) -> EmailTemplate:
    return EmailTemplate(
        subject=f"Welcome to {app_name}!",
        html_body=WELCOME_HTML.format(app_name=escape(app_name), name=escape(fullname)),
        text_body=WELCOME_TEXT.format(app_name=app_name, name=fullname),
    )
