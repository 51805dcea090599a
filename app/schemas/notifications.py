"""Schemas for in-app notifications."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from app.models.notification import NotificationStatus, NotificationType


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    message: str
    type: NotificationType
    status: NotificationStatus
    related_entity_type: str | None = None
    related_entity_id: int | None = None
    created_at: datetime | None = None
    read_at: datetime | None = None


class UnreadCountResponse(BaseModel):
    unread: int


class MarkAllReadResponse(BaseModel):
    updated: int
