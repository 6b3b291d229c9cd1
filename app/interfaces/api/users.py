"""User administration routes: list and (de)activate accounts."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from app.application.services.auth_service import AuthService
from app.domain.models.user import User
from app.domain.schemas.auth import UserRead
from app.interfaces.api.deps import get_current_user, require_admin
from app.interfaces.deps import get_auth_service

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("", response_model=List[UserRead])
def list_users(
    service: AuthService = Depends(get_auth_service),
    admin: User = Depends(require_admin),
):
    return [UserRead.model_validate(u) for u in service.list_users()]


@router.patch("/{user_id}/toggle-active", response_model=UserRead)
def toggle_user_active(
    user_id: UUID,
    service: AuthService = Depends(get_auth_service),
    caller: User = Depends(get_current_user),
):
    user = service.toggle_user_active(caller.id, caller.role, user_id)
    return UserRead.model_validate(user)
