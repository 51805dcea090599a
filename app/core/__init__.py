"""Core app configuration, roles, errors and database."""

from app.core.config import get_settings, settings

__all__ = ["get_settings", "settings"]
