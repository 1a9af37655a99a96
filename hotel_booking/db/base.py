"""SQLAlchemy declarative base and shared column mixins."""

from sqlalchemy import Column, DateTime, func
from sqlalchemy.orm import DeclarativeBase, declarative_mixin

from hotel_booking.core.clock import utcnow


class Base(DeclarativeBase):
    pass


@declarative_mixin
class TimestampMixin:
    """UTC timestamps; created_at on insert, updated_at on every write."""

    created_at = Column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False, index=True
    )
    updated_at = Column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False
    )
