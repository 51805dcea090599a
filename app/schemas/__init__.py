"""Pydantic request/response schemas."""

from app.schemas.auth import (
    LoginRequest,
    LogoutResponse,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
    UsersListResponse,
    UserStatusUpdate,
)
from app.schemas.errors import AccessDeniedResponse, ErrorResponse
from app.schemas.health import HealthResponse
from app.schemas.notifications import (
    MarkAllReadResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from app.schemas.rides import BookingCreate, BookingResponse, RideCreate, RideResponse

__all__ = [
    "AccessDeniedResponse",
    "BookingCreate",
    "BookingResponse",
    "ErrorResponse",
    "HealthResponse",
    "LoginRequest",
    "LogoutResponse",
    "MarkAllReadResponse",
    "NotificationResponse",
    "RefreshRequest",
    "RegisterRequest",
    "RideCreate",
    "RideResponse",
    "TokenResponse",
    "UnreadCountResponse",
    "UserResponse",
    "UserStatusUpdate",
    "UsersListResponse",
]
