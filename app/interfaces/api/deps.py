"""FastAPI dependencies: bearer token identity and role gates."""

from typing import Callable, Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.application.services.token_service import Claims, TokenService
from app.core.exceptions import AccountInactive, InvalidToken, PermissionDenied
from app.domain.models.user import User, UserRole
from app.domain.repositories.user_repository import UserRepository
from app.interfaces.deps import get_token_service, get_user_repository

security = HTTPBearer(auto_error=False)


def get_current_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenService = Depends(get_token_service),
) -> Claims:
    """Identity and role from the bearer token, without a store lookup."""
    if credentials is None or not credentials.credentials:
        raise InvalidToken("Missing authentication token")
    return tokens.validate_token(credentials.credentials)


def get_current_user(
    claims: Claims = Depends(get_current_claims),
    users: UserRepository = Depends(get_user_repository),
) -> User:
    """Re-load the caller so deactivation takes effect before the token expires."""
    try:
        user_id = UUID(claims.user_id)
    except ValueError:
        raise InvalidToken()

    user = users.find_by_id(user_id)
    if user is None:
        raise InvalidToken("User no longer exists")
    if not user.is_active:
        raise AccountInactive()
    return user


def require_roles(*roles: UserRole) -> Callable[..., User]:
    """Require the caller's current (store) role to be one of `roles`."""
    allowed = frozenset(roles)

    def dependency(user: User = Depends(get_current_user)) -> User:
        if UserRole(user.role) not in allowed:
            raise PermissionDenied()
        return user

    return dependency


require_admin = require_roles(UserRole.ADMIN, UserRole.SUPER_ADMIN)
