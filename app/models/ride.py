"""ORM models for posted rides and seat bookings."""

import enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import relationship

from app.models.base import Base, CreatedAtMixin


class RideStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class BookingStatus(str, enum.Enum):
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


class Ride(CreatedAtMixin, Base):
    """A trip offered by a driver with a fixed number of seats."""

    __tablename__ = "rides"
    __table_args__ = (
        CheckConstraint("available_seats >= 0", name="ck_rides_available_seats_non_negative"),
        CheckConstraint("available_seats <= total_seats", name="ck_rides_available_le_total"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    driver_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    origin = Column(String(255), nullable=False, index=True)
    destination = Column(String(255), nullable=False, index=True)
    departure_time = Column(DateTime(timezone=True), nullable=False, index=True)
    total_seats = Column(Integer, nullable=False)
    available_seats = Column(Integer, nullable=False)
    price_per_seat = Column(Numeric(10, 2), nullable=False)
    status = Column(
        Enum(RideStatus, name="ride_status", native_enum=False, length=16),
        nullable=False,
        default=RideStatus.SCHEDULED,
    )

    driver = relationship("User")
    bookings = relationship("Booking", back_populates="ride")


class Booking(CreatedAtMixin, Base):
    """Seats reserved by a passenger on a ride."""

    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ride_id = Column(Integer, ForeignKey("rides.id"), nullable=False, index=True)
    passenger_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    seats = Column(Integer, nullable=False)
    status = Column(
        Enum(BookingStatus, name="booking_status", native_enum=False, length=16),
        nullable=False,
        default=BookingStatus.CONFIRMED,
    )

    ride = relationship("Ride", back_populates="bookings")
