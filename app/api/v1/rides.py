"""Public ride search and details."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.schemas.rides import RideResponse
from app.services.rides import get_ride, search_rides

router = APIRouter()


@router.get("/search", response_model=list[RideResponse])
def search(
    db: Annotated[Session, Depends(get_db)],
    origin: Annotated[str | None, Query(max_length=255)] = None,
    destination: Annotated[str | None, Query(max_length=255)] = None,
    on_date: Annotated[date | None, Query(alias="date")] = None,
) -> list[RideResponse]:
    """Scheduled rides with free seats; origin/destination match exactly (case-insensitive)."""
    rides = search_rides(db, origin=origin, destination=destination, on_date=on_date)
    return [RideResponse.model_validate(r) for r in rides]


@router.get("/{ride_id}", response_model=RideResponse)
def read_ride(ride_id: int, db: Annotated[Session, Depends(get_db)]) -> RideResponse:
    return RideResponse.model_validate(get_ride(db, ride_id))
