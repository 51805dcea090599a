"""Registration, login, token refresh and logout."""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, status

from app.api.deps import get_app_settings, get_authenticator, get_user_store
from app.api.middleware import extract_bearer_token
from app.core.config import Settings
from app.services.authenticator import Authenticator
from app.services.tokens import TokenError
from app.services.users import SqlUserStore, register_user
from app.schemas.auth import (
    LoginRequest,
    LogoutResponse,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from app.schemas.errors import ErrorResponse

router = APIRouter()


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
def register(
    body: RegisterRequest,
    store: Annotated[SqlUserStore, Depends(get_user_store)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> UserResponse:
    """Create a PASSENGER, DRIVER or BOTH account. Admins are created with the CLI."""
    user = register_user(
        store,
        body.username,
        str(body.email),
        body.password,
        body.role,
        rounds=settings.BCRYPT_ROUNDS,
    )
    return UserResponse.model_validate(user)


@router.post("/login", response_model=TokenResponse, responses={401: {"model": ErrorResponse}})
def login(
    body: LoginRequest,
    authenticator: Annotated[Authenticator, Depends(get_authenticator)],
) -> TokenResponse:
    """
    Authenticate with username (or email) and password; returns a JWT pair.
    Include the access token in the Authorization header as: Bearer <access_token>
    """
    result = authenticator.login(body.username, body.password)
    return TokenResponse(
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        role=result.user.role,
    )


@router.post("/refresh", response_model=TokenResponse, responses={401: {"model": ErrorResponse}})
def refresh(
    body: RefreshRequest,
    authenticator: Annotated[Authenticator, Depends(get_authenticator)],
) -> TokenResponse:
    """Exchange a refresh token for a new pair. Each refresh token can be used once."""
    result = authenticator.refresh(body.refresh_token)
    return TokenResponse(
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        role=result.user.role,
    )


@router.post("/logout", response_model=LogoutResponse)
def logout(
    authenticator: Annotated[Authenticator, Depends(get_authenticator)],
    authorization: Annotated[str | None, Header()] = None,
) -> LogoutResponse:
    """
    Revoke the bearer access token until it expires.

    A missing, malformed or already-invalid token returns success=false and
    changes nothing.
    """
    token = extract_bearer_token(authorization)
    if not token:
        return LogoutResponse(success=False, message="Invalid token")
    try:
        authenticator.logout(token)
    except TokenError:
        return LogoutResponse(success=False, message="Invalid token")
    return LogoutResponse(success=True, message="Logout successful")
