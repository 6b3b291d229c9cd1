"""
User Repository Interface.
The credential store as seen by the authentication flow.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from app.domain.models.user import User, UserRole
from app.domain.repositories.base import BaseRepository


@dataclass
class NewUser:
    """Everything needed to insert an unverified account."""
    fullname: str
    email: str
    password_hash: str
    role: UserRole
    is_active: bool
    email_verification_code: Optional[str]
    email_verification_expires_at: Optional[datetime]
    is_email_verified: bool = False


class UserRepository(BaseRepository[User]):
    """Interface for User-specific operations. All calls are single-row."""

    def find_by_email(self, email: str) -> Optional[User]:
        ...

    def find_by_id(self, user_id: UUID) -> Optional[User]:
        ...

    def find_by_verification_code(self, code: str) -> Optional[User]:
        ...

    def insert(self, new_user: NewUser) -> User:
        """Insert a user; raises EmailAlreadyExists when the email is taken."""
        ...

    def update_verification_state(self, user: User) -> User:
        """Mark the email verified and clear the code and its expiry."""
        ...

    def update_verification_code(self, user: User, code: str, expires_at: datetime) -> User:
        ...

    def toggle_active(self, user_id: UUID) -> User:
        """Flip is_active; raises DomainError(NOT_FOUND) for unknown ids."""
        ...

    def list_all(self) -> List[User]:
        """All users, newest first."""
        ...
