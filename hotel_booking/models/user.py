"""
Guest, owner and admin accounts.

Only the fields the booking core consumes live here: the role, the contact
snapshot source, and the aggregate counters bumped on each booking.
"""

import enum

from sqlalchemy import Boolean, CheckConstraint, Column, Integer, Numeric, String
from sqlalchemy.orm import relationship

from hotel_booking.db.base import Base, TimestampMixin


class UserRole(str, enum.Enum):
    USER = "user"
    HOTEL_OWNER = "hotel_owner"
    ADMIN = "admin"


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(100), nullable=False, default="")
    last_name = Column(String(100), nullable=False, default="")
    phone = Column(String(50), nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.USER.value)
    is_active = Column(Boolean, default=True, nullable=False)

    # Denormalized counters, incremented in the booking transaction
    total_bookings = Column(Integer, nullable=False, default=0)
    total_spent = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)

    hotels = relationship("Hotel", back_populates="owner")

    __table_args__ = (
        CheckConstraint("role IN ('user', 'hotel_owner', 'admin')", name="check_user_role"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
