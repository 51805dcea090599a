"""Driver endpoints: post, list and cancel rides."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import require_roles
from app.core.database import get_db
from app.core.roles import Role
from app.models.user import User
from app.schemas.rides import RideCreate, RideResponse
from app.services.rides import cancel_ride, create_ride, list_driver_rides

router = APIRouter()

require_driver = require_roles(Role.DRIVER)


@router.post("/rides", response_model=RideResponse, status_code=status.HTTP_201_CREATED)
def post_ride(
    body: RideCreate,
    driver: Annotated[User, Depends(require_driver)],
    db: Annotated[Session, Depends(get_db)],
) -> RideResponse:
    ride = create_ride(
        db,
        driver_id=driver.id,
        origin=body.origin,
        destination=body.destination,
        departure_time=body.departure_time,
        total_seats=body.total_seats,
        price_per_seat=body.price_per_seat,
    )
    return RideResponse.model_validate(ride)


@router.get("/rides", response_model=list[RideResponse])
def my_rides(
    driver: Annotated[User, Depends(require_driver)],
    db: Annotated[Session, Depends(get_db)],
) -> list[RideResponse]:
    return [RideResponse.model_validate(r) for r in list_driver_rides(db, driver.id)]


@router.post("/rides/{ride_id}/cancel", response_model=RideResponse)
def cancel(
    ride_id: int,
    driver: Annotated[User, Depends(require_driver)],
    db: Annotated[Session, Depends(get_db)],
) -> RideResponse:
    """Cancel a scheduled ride; confirmed bookings on it are cancelled too."""
    return RideResponse.model_validate(cancel_ride(db, ride_id, driver.id))
