"""Auth service: registration, login and the email verification lifecycle.

A user goes Registered (unverified) -> Verified exactly once. Verification
codes are single use and expire; resending replaces the previous code.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional
from uuid import UUID

import structlog

from app.application.services.authorization import ensure_can_toggle_active
from app.application.services.email_templates import (
    EmailTemplate,
    verification_email,
    verification_link,
    welcome_email,
)
from app.application.services.token_service import TokenService
from app.config import Settings
from app.core.exceptions import (
    AccountInactive,
    EmailAlreadyExists,
    EmailNotVerified,
    InvalidCredentials,
    InvalidVerificationCode,
    NotificationFailed,
    UserNotFound,
    VerificationCodeExpired,
)
from app.core.security import PasswordHasher, generate_verification_code
from app.domain.models.user import PRIVILEGED_ROLES, User, UserRole
from app.domain.repositories.user_repository import NewUser, UserRepository
from app.infrastructure.mailer import NotificationError, Notifier

logger = structlog.get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # Some stores (SQLite) hand back naive datetimes; they are stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass
class AuthResult:
    token: str
    user: User


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        hasher: PasswordHasher,
        tokens: TokenService,
        notifier: Notifier,
        settings: Settings,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.users = users
        self.hasher = hasher
        self.tokens = tokens
        self.notifier = notifier
        self.settings = settings
        self.clock = clock
        self.code_ttl = timedelta(hours=settings.VERIFICATION_CODE_TTL_HOURS)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def resolve_role(self, requested_role: Optional[str]) -> UserRole:
        role = UserRole.parse(requested_role) or UserRole.MEMBER
        if role in PRIVILEGED_ROLES and not self.settings.ALLOW_PRIVILEGED_SELF_REGISTRATION:
            logger.warning("Privileged self-registration refused", requested_role=role.value)
            return UserRole.MEMBER
        return role

    def register(
        self,
        fullname: str,
        email: str,
        password: str,
        requested_role: Optional[str] = None,
        is_active: bool = True,
    ) -> AuthResult:
        if self.users.find_by_email(email) is not None:
            logger.info("Registration rejected, email taken", email=email)
            raise EmailAlreadyExists(email)

        user = self.users.insert(
            NewUser(
                fullname=fullname,
                email=email,
                password_hash=self.hasher.hash(password),
                role=self.resolve_role(requested_role),
                is_active=is_active,
                email_verification_code=self._new_code(),
                email_verification_expires_at=self.clock() + self.code_ttl,
            )
        )
        logger.info("User registered", user_id=str(user.id), role=UserRole(user.role).value)

        try:
            self._send(user, self._verification_template(user))
        except NotificationError as exc:
            # The account exists; the user can ask for a resend
            logger.error("Failed to send verification email", email=user.email, error=str(exc))

        return AuthResult(token=self.tokens.generate_token(user), user=user)

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> AuthResult:
        user = self.users.find_by_email(email)
        if user is None:
            self.hasher.dummy_verify()
            logger.info("Login failed", reason="unknown_email", email=email)
            raise InvalidCredentials()
        if not self.hasher.verify(password, user.password_hash):
            logger.info("Login failed", reason="wrong_password", user_id=str(user.id))
            raise InvalidCredentials()
        if not user.is_active:
            logger.info("Login failed", reason="inactive", user_id=str(user.id))
            raise AccountInactive()
        if not user.is_email_verified:
            logger.info("Login failed", reason="unverified", user_id=str(user.id))
            raise EmailNotVerified()

        logger.info("User logged in", user_id=str(user.id))
        return AuthResult(token=self.tokens.generate_token(user), user=user)

    # ------------------------------------------------------------------
    # Email verification
    # ------------------------------------------------------------------

    def verify_email(self, code: str) -> User:
        user = self.users.find_by_verification_code(code) if code else None
        if user is None:
            raise InvalidVerificationCode()

        expires_at = user.email_verification_expires_at
        if expires_at is not None and self.clock() > as_utc(expires_at):
            # Left in place on purpose: only a resend issues a usable code
            logger.info("Verification code expired", user_id=str(user.id))
            raise VerificationCodeExpired()

        user = self.users.update_verification_state(user)
        logger.info("Email verified", user_id=str(user.id))

        try:
            self._send(user, welcome_email(self.settings.APP_NAME, user.fullname))
        except NotificationError as exc:
            logger.error("Failed to send welcome email", email=user.email, error=str(exc))

        return user

    def resend_verification(self, email: str) -> User:
        user = self.users.find_by_email(email)
        if user is None:
            raise UserNotFound(email)

        if user.is_email_verified:
            logger.info("Resend skipped, already verified", user_id=str(user.id))
            return user

        user = self.users.update_verification_code(
            user, self._new_code(), self.clock() + self.code_ttl
        )
        try:
            self._send(user, self._verification_template(user))
        except NotificationError as exc:
            logger.error("Failed to resend verification email", email=user.email, error=str(exc))
            raise NotificationFailed() from exc

        logger.info("Verification email resent", user_id=str(user.id))
        return user

    # ------------------------------------------------------------------
    # Account administration
    # ------------------------------------------------------------------

    def toggle_user_active(self, caller_id: UUID, caller_role: UserRole, target_id: UUID) -> User:
        ensure_can_toggle_active(caller_id, caller_role, target_id)
        user = self.users.toggle_active(target_id)
        logger.info(
            "User active status toggled",
            user_id=str(target_id),
            is_active=user.is_active,
            by=str(caller_id),
        )
        return user

    def list_users(self) -> List[User]:
        return self.users.list_all()

    def seed_super_admin(self, email: str, password: str, fullname: str) -> Optional[User]:
        """Create a verified, active super admin unless the email already exists."""
        if self.users.find_by_email(email) is not None:
            return None
        try:
            user = self.users.insert(
                NewUser(
                    fullname=fullname,
                    email=email,
                    password_hash=self.hasher.hash(password),
                    role=UserRole.SUPER_ADMIN,
                    is_active=True,
                    email_verification_code=None,
                    email_verification_expires_at=None,
                    is_email_verified=True,
                )
            )
        except EmailAlreadyExists:
            # Another worker seeded it first
            return None
        logger.info("Super admin seeded", user_id=str(user.id))
        return user

    # ------------------------------------------------------------------

    def _new_code(self) -> str:
        return generate_verification_code(self.settings.VERIFICATION_CODE_LENGTH)

    def _verification_template(self, user: User) -> EmailTemplate:
        link = verification_link(self.settings.BASE_URL, user.email_verification_code)
        return verification_email(
            self.settings.APP_NAME,
            user.fullname,
            link,
            ttl_hours=self.settings.VERIFICATION_CODE_TTL_HOURS,
        )

    def _send(self, user: User, template: EmailTemplate) -> None:
        self.notifier.send(
            user.email,
            user.fullname,
            template.subject,
            template.html_body,
            template.text_body,
        )
