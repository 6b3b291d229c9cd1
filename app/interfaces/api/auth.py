"""Auth API routes: register, login, email verification, me."""

from fastapi import APIRouter, Depends, Query, status

from app.application.services.auth_service import AuthService
from app.domain.models.user import User
from app.domain.schemas.auth import (
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    ResendVerificationRequest,
    TokenResponse,
    UserInfo,
    UserRead,
)
from app.interfaces.api.deps import get_current_user
from app.interfaces.deps import get_auth_service

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    result = service.register(
        fullname=body.fullname,
        email=body.email,
        password=body.password,
        requested_role=body.user_role,
        is_active=body.is_active,
    )
    return TokenResponse(access_token=result.token, user=UserInfo.model_validate(result.user))


@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest, service: AuthService = Depends(get_auth_service)):
    result = service.login(body.email, body.password)
    return TokenResponse(access_token=result.token, user=UserInfo.model_validate(result.user))


@router.get("/verify-email", response_model=MessageResponse)
def verify_email(
    code: str = Query(..., min_length=1),
    service: AuthService = Depends(get_auth_service),
):
    service.verify_email(code)
    return MessageResponse(message="Email verified successfully!")


@router.post("/resend-verification", response_model=MessageResponse)
def resend_verification(
    body: ResendVerificationRequest,
    service: AuthService = Depends(get_auth_service),
):
    user = service.resend_verification(body.email)
    if user.is_email_verified:
        return MessageResponse(message="Email is already verified")
    return MessageResponse(message=f"Verification email resent to: {user.email}")


@router.get("/me", response_model=UserRead)
def get_me(user: User = Depends(get_current_user)):
    return UserRead.model_validate(user)
