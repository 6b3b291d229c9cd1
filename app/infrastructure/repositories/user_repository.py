"""
SQLAlchemy Implementation of User Repository.
"""

from dataclasses import asdict
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from app.core.exceptions import DomainError, DomainErrorKind, EmailAlreadyExists, ResourceKind
from app.domain.models.user import User
from app.domain.repositories.user_repository import NewUser, UserRepository
from app.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyUserRepository(SQLAlchemyRepository[User], UserRepository):
    """User repository implementation using SQLAlchemy."""

    resource = ResourceKind.USER

    def find_by_email(self, email: str) -> Optional[User]:
        with self.guard("find_by_email"):
            return self.db.query(User).filter(User.email == email).first()

    def find_by_id(self, user_id: UUID) -> Optional[User]:
        return self.get_by_id(user_id)

    def find_by_verification_code(self, code: str) -> Optional[User]:
        with self.guard("find_by_verification_code"):
            return self.db.query(User).filter(User.email_verification_code == code).first()

    def insert(self, new_user: NewUser) -> User:
        # The unique index on email is the source of truth under concurrent inserts
        try:
            return self.create(asdict(new_user))
        except DomainError as exc:
            if exc.kind is DomainErrorKind.CONFLICT:
                raise EmailAlreadyExists(new_user.email) from exc
            raise

    def update_verification_state(self, user: User) -> User:
        return self.update(
            user,
            {
                "is_email_verified": True,
                "email_verification_code": None,
                "email_verification_expires_at": None,
            },
        )

    def update_verification_code(self, user: User, code: str, expires_at: datetime) -> User:
        return self.update(
            user,
            {"email_verification_code": code, "email_verification_expires_at": expires_at},
        )

    def toggle_active(self, user_id: UUID) -> User:
        user = self.find_by_id(user_id)
        if user is None:
            raise DomainError.not_found(ResourceKind.USER, user_id)
        return self.update(user, {"is_active": not user.is_active})

    def list_all(self) -> List[User]:
        with self.guard("list_all"):
            return self.db.query(User).order_by(User.created_at.desc()).all()
