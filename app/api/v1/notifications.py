"""Notifications for passengers and drivers."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import require_roles
from app.core.database import get_db
from app.core.roles import Role
from app.models.user import User
from app.schemas.errors import ErrorResponse
from app.schemas.notifications import (
    MarkAllReadResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from app.services.notifications import (
    list_notifications,
    mark_all_read,
    mark_read,
    unread_count,
)

router = APIRouter()

require_member = require_roles(Role.PASSENGER, Role.DRIVER)


@router.get("", response_model=list[NotificationResponse])
def my_notifications(
    user: Annotated[User, Depends(require_member)],
    db: Annotated[Session, Depends(get_db)],
    unread: Annotated[bool, Query(description="Only unread notifications")] = False,
) -> list[NotificationResponse]:
    """Newest first."""
    return [
        NotificationResponse.model_validate(n)
        for n in list_notifications(db, user.id, unread_only=unread)
    ]


@router.get("/unread-count", response_model=UnreadCountResponse)
def my_unread_count(
    user: Annotated[User, Depends(require_member)],
    db: Annotated[Session, Depends(get_db)],
) -> UnreadCountResponse:
    return UnreadCountResponse(unread=unread_count(db, user.id))


@router.put(
    "/{notification_id}/read",
    response_model=NotificationResponse,
    responses={404: {"model": ErrorResponse}},
)
def read_one(
    notification_id: int,
    user: Annotated[User, Depends(require_member)],
    db: Annotated[Session, Depends(get_db)],
) -> NotificationResponse:
    return NotificationResponse.model_validate(mark_read(db, user.id, notification_id))


@router.put("/mark-all-read", response_model=MarkAllReadResponse)
def read_all(
    user: Annotated[User, Depends(require_member)],
    db: Annotated[Session, Depends(get_db)],
) -> MarkAllReadResponse:
    return MarkAllReadResponse(updated=mark_all_read(db, user.id))
