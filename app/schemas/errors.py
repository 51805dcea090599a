"""Error bodies returned by the API."""

from datetime import datetime

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """401 and domain errors: stable code plus human-readable message."""

    error: str = Field(..., description="Stable machine-readable error code")
    message: str = Field(..., description="Human-readable explanation")


class AccessDeniedResponse(BaseModel):
    """403 body for callers whose role does not grant access."""

    timestamp: datetime
    message: str = "Access denied"
    details: str
