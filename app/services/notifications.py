"""In-app notifications: created alongside booking changes, read by their owner."""

import logging
from datetime import UTC, datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.models import Notification, NotificationStatus, NotificationType

logger = logging.getLogger(__name__)


def notify(
    db: Session,
    user_id: int,
    type: NotificationType,
    title: str,
    message: str,
    related_entity_type: str | None = None,
    related_entity_id: int | None = None,
) -> Notification:
    """Add a notification to the caller's transaction; committed with the change it reports."""
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        status=NotificationStatus.UNREAD,
        related_entity_type=related_entity_type,
        related_entity_id=related_entity_id,
    )
    db.add(notification)
    logger.debug("Notification queued: user_id=%s type=%s", user_id, type.value)
    return notification


def list_notifications(db: Session, user_id: int, unread_only: bool = False) -> list[Notification]:
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.status == NotificationStatus.UNREAD)
    return query.order_by(Notification.id.desc()).all()


def unread_count(db: Session, user_id: int) -> int:
    return (
        db.query(func.count(Notification.id))
        .filter(
            Notification.user_id == user_id,
            Notification.status == NotificationStatus.UNREAD,
        )
        .scalar()
    )


def mark_read(db: Session, user_id: int, notification_id: int) -> Notification:
    """Mark one of the user's notifications read. Already-read ones are left unchanged."""
    notification = db.get(Notification, notification_id)
    if notification is None or notification.user_id != user_id:
        raise NotFoundError("Notification not found.", code="notification_not_found")
    if notification.status != NotificationStatus.READ:
        notification.status = NotificationStatus.READ
        notification.read_at = datetime.now(UTC)
        db.commit()
        db.refresh(notification)
    return notification


def mark_all_read(db: Session, user_id: int) -> int:
    """Mark every unread notification of the user read; returns how many changed."""
    updated = (
        db.query(Notification)
        .filter(
            Notification.user_id == user_id,
            Notification.status == NotificationStatus.UNREAD,
        )
        .update(
            {Notification.status: NotificationStatus.READ, Notification.read_at: datetime.now(UTC)},
            synchronize_session=False,
        )
    )
    db.commit()
    logger.info("Notifications marked read: user_id=%s count=%s", user_id, updated)
    return updated
