"""Schemas for rides and bookings."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.ride import BookingStatus, RideStatus

MAX_SEATS_PER_RIDE = 8


class RideCreate(BaseModel):
    """Ride offered by a driver."""

    origin: str = Field(..., min_length=1, max_length=255)
    destination: str = Field(..., min_length=1, max_length=255)
    departure_time: datetime = Field(..., description="Departure instant (timezone-aware)")
    total_seats: int = Field(..., ge=1, le=MAX_SEATS_PER_RIDE)
    price_per_seat: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)

    @field_validator("departure_time")
    @classmethod
    def require_timezone(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            raise ValueError("departure_time must include a timezone offset")
        return v

    @model_validator(mode="after")
    def distinct_endpoints(self) -> "RideCreate":
        if self.origin.strip().lower() == self.destination.strip().lower():
            raise ValueError("origin and destination must differ")
        return self


class RideResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    driver_id: int
    origin: str
    destination: str
    departure_time: datetime
    total_seats: int
    available_seats: int
    price_per_seat: Decimal
    status: RideStatus


class BookingCreate(BaseModel):
    ride_id: int = Field(..., ge=1)
    seats: int = Field(default=1, ge=1, le=MAX_SEATS_PER_RIDE)


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    ride_id: int
    passenger_id: int
    seats: int
    status: BookingStatus
    created_at: datetime | None = None
