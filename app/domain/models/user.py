"""User domain model: maps to the 'users' table."""

import enum
import uuid
from typing import Optional

from sqlalchemy import Boolean, Column, Date, DateTime, Enum, String, Text, Uuid
from sqlalchemy.sql import func

from app.infrastructure.database import Base


class UserRole(str, enum.Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    MEMBER = "member"
    TREASURER = "treasurer"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["UserRole"]:
        """Parse a role name, accepting `superadmin` and any casing."""
        if not value:
            return None
        normalized = value.strip().lower().replace("-", "_")
        if normalized == "superadmin":
            normalized = cls.SUPER_ADMIN.value
        try:
            return cls(normalized)
        except ValueError:
            return None


PRIVILEGED_ROLES = frozenset({UserRole.ADMIN, UserRole.SUPER_ADMIN})


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    fullname = Column(String(255), nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    phone = Column(String(25), nullable=True)
    dob = Column(Date, nullable=True)
    photo_url = Column(Text, nullable=True)
    role = Column(
        Enum(UserRole, name="user_roles", values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=UserRole.MEMBER,
        index=True,
    )
    email_verification_code = Column(String(255), nullable=True, index=True)
    email_verification_expires_at = Column(DateTime(timezone=True), nullable=True)
    is_email_verified = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self):
        return f"<User {self.email}>"
