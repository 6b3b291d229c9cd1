"""Pydantic schemas for User and Auth."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from app.domain.models.user import UserRole


class RegisterRequest(BaseModel):
    fullname: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)
    user_role: Optional[str] = None
    is_active: bool = True


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ResendVerificationRequest(BaseModel):
    email: EmailStr


class UserInfo(BaseModel):
    id: UUID
    fullname: str
    email: str
    role: UserRole

    model_config = {"from_attributes": True}


class UserRead(UserInfo):
    phone: Optional[str] = None
    is_active: bool
    is_email_verified: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserInfo


class MessageResponse(BaseModel):
    message: str
