"""Health check response."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    environment: str = Field(description="APP_ENV of the running service")
    database: Literal["connected", "disconnected"]
    revoked_tokens: int = Field(
        default=0, description="Logged-out tokens still tracked until they expire"
    )
