"""Passenger bookings."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import require_roles
from app.core.database import get_db
from app.core.roles import Role
from app.models.user import User
from app.schemas.errors import ErrorResponse
from app.schemas.rides import BookingCreate, BookingResponse
from app.services.rides import book_seats, cancel_booking, list_passenger_bookings

router = APIRouter()

require_passenger = require_roles(Role.PASSENGER)


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def create_booking(
    body: BookingCreate,
    passenger: Annotated[User, Depends(require_passenger)],
    db: Annotated[Session, Depends(get_db)],
) -> BookingResponse:
    """Reserve seats on a scheduled ride."""
    booking = book_seats(db, ride_id=body.ride_id, passenger_id=passenger.id, seats=body.seats)
    return BookingResponse.model_validate(booking)


@router.get("", response_model=list[BookingResponse])
def my_bookings(
    passenger: Annotated[User, Depends(require_passenger)],
    db: Annotated[Session, Depends(get_db)],
) -> list[BookingResponse]:
    return [BookingResponse.model_validate(b) for b in list_passenger_bookings(db, passenger.id)]


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel(
    booking_id: int,
    passenger: Annotated[User, Depends(require_passenger)],
    db: Annotated[Session, Depends(get_db)],
) -> BookingResponse:
    return BookingResponse.model_validate(cancel_booking(db, booking_id, passenger.id))
