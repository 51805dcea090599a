"""Declarative Base and the columns shared by every table."""

from sqlalchemy import Column, DateTime, func
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class CreatedAtMixin:
    """Adds a server-populated ``created_at`` timestamp."""

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
