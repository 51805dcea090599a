"""Request/response schemas for auth endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.core.roles import Role
from app.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    USERNAME_PATTERN,
)


class LoginRequest(BaseModel):
    """Credentials for login. ``username`` may also be the account email."""

    username: str = Field(..., min_length=1, max_length=255, description="Username or email")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class RegisterRequest(BaseModel):
    """Self-service account registration."""

    username: str = Field(
        ...,
        min_length=USERNAME_MIN_LEN,
        max_length=USERNAME_MAX_LEN,
        pattern=USERNAME_PATTERN,
        description="Unique username (letters, digits, '_', '.', '-')",
    )
    email: EmailStr = Field(..., description="Unique email address")
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )
    role: Role = Field(default=Role.PASSENGER, description="PASSENGER, DRIVER or BOTH")

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        return v.strip()


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1, description="Refresh token from login")


class TokenResponse(BaseModel):
    """JWT pair returned after successful login or refresh."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    role: Role = Field(..., description="Role of the authenticated user")


class LogoutResponse(BaseModel):
    success: bool
    message: str


class UserResponse(BaseModel):
    """User profile (no password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: Role
    is_verified: bool
    is_active: bool
    created_at: datetime | None = None


class UsersListResponse(BaseModel):
    """Response for GET /admin/users (admin only)."""

    users: list[UserResponse]


class UserStatusUpdate(BaseModel):
    is_active: bool = Field(..., description="False blocks the account from logging in")
