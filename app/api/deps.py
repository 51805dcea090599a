"""Dependencies for endpoints: auth components from app state, current identity and user."""

from collections.abc import Callable
from datetime import timedelta
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.api.errors import ForbiddenError, NotAuthenticatedError
from app.core.config import Settings
from app.core.database import get_db
from app.core.roles import Role
from app.models.user import User
from app.services.authenticator import AccountDisabledError, Authenticator
from app.services.revocation import RevocationRegistry
from app.services.tokens import Identity, TokenService
from app.services.users import SqlUserStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_revocations(request: Request) -> RevocationRegistry:
    return request.app.state.revocations


def get_user_store(db: Annotated[Session, Depends(get_db)]) -> SqlUserStore:
    return SqlUserStore(db)


def get_authenticator(
    store: Annotated[SqlUserStore, Depends(get_user_store)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    revocations: Annotated[RevocationRegistry, Depends(get_revocations)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> Authenticator:
    return Authenticator(
        store,
        tokens,
        revocations,
        access_ttl=timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
        refresh_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        password_rounds=settings.BCRYPT_ROUNDS,
    )


def get_current_identity(request: Request) -> Identity:
    """Identity established by the access filter. Raises 401 when the request is anonymous."""
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise NotAuthenticatedError("Authentication required.")
    return identity


def get_current_user(
    identity: Annotated[Identity, Depends(get_current_identity)],
    store: Annotated[SqlUserStore, Depends(get_user_store)],
) -> User:
    """Load the user behind the token. Raises 401 if it no longer exists, 403 if disabled."""
    user = store.get_by_id(identity.user_id) if identity.user_id is not None else None
    if user is None or user.username != identity.subject:
        raise NotAuthenticatedError("User not found.", code="user_not_found")
    if not user.is_active:
        raise AccountDisabledError("Account is disabled.")
    return user


def require_roles(*roles: Role) -> Callable[..., User]:
    """
    Dependency factory: current user must hold one of ``roles`` (BOTH counts as DRIVER and PASSENGER).

    Usage:
        @router.post(..., dependencies=[Depends(require_roles(Role.DRIVER))])
    """

    def checker(user: Annotated[User, Depends(get_current_user)]) -> User:
        if not any(user.role.satisfies(required) for required in roles):
            raise ForbiddenError(f"Role {user.role.value} cannot access this resource.")
        return user

    return checker
