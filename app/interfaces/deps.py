"""
API Dependencies.
Wires repositories and services from the cached settings.
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from app.application.services.auth_service import AuthService
from app.application.services.token_service import TokenService
from app.config import Settings, get_settings
from app.core.security import PasswordHasher
from app.domain.models.user import User
from app.domain.repositories.user_repository import UserRepository
from app.infrastructure.database import get_db
from app.infrastructure.mailer import Notifier, SMTPNotifier
from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    """Get user repository instance."""
    return SQLAlchemyUserRepository(db, User)


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().BCRYPT_ROUNDS)


def get_token_service(settings: Settings = Depends(get_settings)) -> TokenService:
    return TokenService(settings)


def get_notifier(settings: Settings = Depends(get_settings)) -> Notifier:
    return SMTPNotifier(settings)


def get_auth_service(
    users: UserRepository = Depends(get_user_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
    notifier: Notifier = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(users, hasher, tokens, notifier, settings)
