"""Admin-only user management."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.deps import get_user_store, require_roles
from app.core.roles import Role
from app.models.user import User
from app.schemas.auth import UserResponse, UsersListResponse, UserStatusUpdate
from app.services.users import SqlUserStore

router = APIRouter()

require_admin = require_roles(Role.ADMIN)


@router.get("/users", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[User, Depends(require_admin)],
    store: Annotated[SqlUserStore, Depends(get_user_store)],
) -> UsersListResponse:
    """List all users (admin only)."""
    return UsersListResponse(users=[UserResponse.model_validate(u) for u in store.list_users()])


@router.patch("/users/{user_id}/status", response_model=UserResponse)
def set_user_status(
    user_id: int,
    body: UserStatusUpdate,
    _admin: Annotated[User, Depends(require_admin)],
    store: Annotated[SqlUserStore, Depends(get_user_store)],
) -> UserResponse:
    """Block or unblock an account. Blocked users cannot log in or refresh tokens."""
    return UserResponse.model_validate(store.set_active(user_id, body.is_active))
