"""Ride posting, search and seat booking."""

import logging
from datetime import UTC, date, datetime, time, timedelta
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError, ServiceError
from app.models import Booking, BookingStatus, NotificationType, Ride, RideStatus
from app.services.notifications import notify

logger = logging.getLogger(__name__)

MAX_SEARCH_RESULTS = 100


class RideNotBookableError(ConflictError):
    code = "ride_not_bookable"


class InsufficientSeatsError(ConflictError):
    code = "insufficient_seats"


class OwnRideError(ServiceError):
    code = "own_ride"
    status_code = 422


def _ride_not_found() -> NotFoundError:
    return NotFoundError("Ride not found.", code="ride_not_found")


def _route(ride: Ride) -> str:
    return f"{ride.origin} to {ride.destination}"


def _locked_ride(db: Session, ride_id: int) -> Ride | None:
    # FOR UPDATE serialises concurrent seat changes on PostgreSQL; ignored by SQLite.
    return (
        db.query(Ride)
        .filter(Ride.id == ride_id)
        .with_for_update()
        .populate_existing()
        .first()
    )


def create_ride(
    db: Session,
    driver_id: int,
    origin: str,
    destination: str,
    departure_time: datetime,
    total_seats: int,
    price_per_seat: Decimal,
) -> Ride:
    ride = Ride(
        driver_id=driver_id,
        origin=origin.strip(),
        destination=destination.strip(),
        departure_time=departure_time.astimezone(UTC),
        total_seats=total_seats,
        available_seats=total_seats,
        price_per_seat=price_per_seat,
        status=RideStatus.SCHEDULED,
    )
    db.add(ride)
    db.commit()
    db.refresh(ride)
    logger.info("Ride posted: id=%s driver_id=%s seats=%s", ride.id, driver_id, total_seats)
    return ride


def get_ride(db: Session, ride_id: int) -> Ride:
    ride = db.get(Ride, ride_id)
    if ride is None:
        raise _ride_not_found()
    return ride


def list_driver_rides(db: Session, driver_id: int) -> list[Ride]:
    return (
        db.query(Ride)
        .filter(Ride.driver_id == driver_id)
        .order_by(Ride.departure_time)
        .all()
    )


def search_rides(
    db: Session,
    origin: str | None = None,
    destination: str | None = None,
    on_date: date | None = None,
) -> list[Ride]:
    """
    Scheduled rides with free seats, filtered by exact origin/destination
    (case-insensitive) and departure date. No route matching.
    """
    query = db.query(Ride).filter(
        Ride.status == RideStatus.SCHEDULED,
        Ride.available_seats > 0,
    )
    if origin:
        query = query.filter(func.lower(Ride.origin) == origin.strip().lower())
    if destination:
        query = query.filter(func.lower(Ride.destination) == destination.strip().lower())
    if on_date is not None:
        start = datetime.combine(on_date, time.min, tzinfo=UTC)
        query = query.filter(
            Ride.departure_time >= start,
            Ride.departure_time < start + timedelta(days=1),
        )
    return query.order_by(Ride.departure_time).limit(MAX_SEARCH_RESULTS).all()


def cancel_ride(db: Session, ride_id: int, driver_id: int) -> Ride:
    """Cancel a driver's own scheduled ride and every confirmed booking on it."""
    ride = _locked_ride(db, ride_id)
    if ride is None or ride.driver_id != driver_id:
        raise _ride_not_found()
    if ride.status != RideStatus.SCHEDULED:
        raise RideNotBookableError(f"Ride is {ride.status.value.lower()}.")
    ride.status = RideStatus.CANCELLED
    bookings = (
        db.query(Booking)
        .filter(Booking.ride_id == ride.id, Booking.status == BookingStatus.CONFIRMED)
        .with_for_update()
        .populate_existing()
        .all()
    )
    for booking in bookings:
        booking.status = BookingStatus.CANCELLED
        notify(
            db,
            booking.passenger_id,
            NotificationType.RIDE_CANCELLED,
            "Ride cancelled",
            f"Your ride {_route(ride)} on {ride.departure_time:%Y-%m-%d %H:%M}"
            " was cancelled by the driver.",
            related_entity_type="BOOKING",
            related_entity_id=booking.id,
        )
    ride.available_seats = ride.total_seats
    db.commit()
    db.refresh(ride)
    logger.info("Ride cancelled: id=%s bookings_cancelled=%s", ride.id, len(bookings))
    return ride


def book_seats(db: Session, ride_id: int, passenger_id: int, seats: int) -> Booking:
    """Reserve ``seats`` on a ride, decrementing its available seats atomically."""
    ride = _locked_ride(db, ride_id)
    if ride is None:
        raise _ride_not_found()
    if ride.driver_id == passenger_id:
        raise OwnRideError("Drivers cannot book their own ride.")
    if ride.status != RideStatus.SCHEDULED:
        raise RideNotBookableError(f"Ride is {ride.status.value.lower()}.")
    if ride.available_seats < seats:
        raise InsufficientSeatsError(
            f"Only {ride.available_seats} seat(s) available on this ride."
        )
    ride.available_seats -= seats
    booking = Booking(
        ride_id=ride.id,
        passenger_id=passenger_id,
        seats=seats,
        status=BookingStatus.CONFIRMED,
    )
    db.add(booking)
    db.flush()
    notify(
        db,
        ride.driver_id,
        NotificationType.BOOKING_CONFIRMED,
        "New booking",
        f"{seats} seat(s) booked on your ride {_route(ride)}.",
        related_entity_type="BOOKING",
        related_entity_id=booking.id,
    )
    db.commit()
    db.refresh(booking)
    logger.info(
        "Booking confirmed: id=%s ride_id=%s passenger_id=%s seats=%s",
        booking.id,
        ride.id,
        passenger_id,
        seats,
    )
    return booking


def list_passenger_bookings(db: Session, passenger_id: int) -> list[Booking]:
    return (
        db.query(Booking)
        .filter(Booking.passenger_id == passenger_id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .all()
    )


def cancel_booking(db: Session, booking_id: int, passenger_id: int) -> Booking:
    """Cancel a passenger's own confirmed booking and release its seats."""
    booking = db.get(Booking, booking_id)
    if booking is None or booking.passenger_id != passenger_id:
        raise NotFoundError("Booking not found.", code="booking_not_found")
    # Re-read under the ride lock; the first read may be stale.
    ride = _locked_ride(db, booking.ride_id)
    db.refresh(booking, with_for_update=True)
    if booking.status != BookingStatus.CONFIRMED:
        raise ConflictError("Booking is already cancelled.", code="booking_cancelled")
    booking.status = BookingStatus.CANCELLED
    if ride is not None and ride.status == RideStatus.SCHEDULED:
        ride.available_seats = min(ride.total_seats, ride.available_seats + booking.seats)
        notify(
            db,
            ride.driver_id,
            NotificationType.BOOKING_CANCELLED,
            "Booking cancelled",
            f"{booking.seats} seat(s) released on your ride {_route(ride)}.",
            related_entity_type="BOOKING",
            related_entity_id=booking.id,
        )
    db.commit()
    db.refresh(booking)
    logger.info("Booking cancelled: id=%s seats_released=%s", booking.id, booking.seats)
    return booking
