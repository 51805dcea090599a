"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import admin, auth, bookings, driver, health, notifications, rides, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(rides.router, prefix="/rides", tags=["rides"])
router.include_router(driver.router, prefix="/driver", tags=["driver"])
router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
