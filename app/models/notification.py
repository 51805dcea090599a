"""ORM model for in-app notifications about rides and bookings."""

import enum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, Text

from app.models.base import Base, CreatedAtMixin


class NotificationType(str, enum.Enum):
    BOOKING_CONFIRMED = "BOOKING_CONFIRMED"
    BOOKING_CANCELLED = "BOOKING_CANCELLED"
    RIDE_CANCELLED = "RIDE_CANCELLED"


class NotificationStatus(str, enum.Enum):
    UNREAD = "UNREAD"
    READ = "READ"


class Notification(CreatedAtMixin, Base):
    """
    Message for one user. related_entity_type/id point at the booking or
    ride the notification is about.
    """

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(
        Enum(NotificationType, name="notification_type", native_enum=False, length=32),
        nullable=False,
    )
    status = Column(
        Enum(NotificationStatus, name="notification_status", native_enum=False, length=16),
        nullable=False,
        default=NotificationStatus.UNREAD,
    )
    related_entity_type = Column(String(32), nullable=True)
    related_entity_id = Column(Integer, nullable=True)
    read_at = Column(DateTime(timezone=True), nullable=True)
