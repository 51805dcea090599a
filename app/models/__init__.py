"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.notification import Notification, NotificationStatus, NotificationType
from app.models.ride import Booking, BookingStatus, Ride, RideStatus
from app.models.user import User

__all__ = [
    "Base",
    "Booking",
    "BookingStatus",
    "Notification",
    "NotificationStatus",
    "NotificationType",
    "Ride",
    "RideStatus",
    "User",
]
