"""
Hotel listing as seen by the booking core.

Key design decisions:
- `version` enables optimistic locking: every booking creation bumps it in
  the same statement that increments the counters, so two writers racing for
  the same hotel cannot both commit against the same snapshot.
- `total_bookings`/`total_revenue` are denormalized gross-volume counters.
"""

from sqlalchemy import Boolean, CheckConstraint, Column, Float, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from hotel_booking.db.base import Base, TimestampMixin


class Hotel(Base, TimestampMixin):
    __tablename__ = "hotels"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    city = Column(String(120), nullable=False)
    country = Column(String(120), nullable=False, default="")

    price_per_night = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    price_per_hour = Column(Numeric(12, 2, asdecimal=False), nullable=True)  # NULL: no hourly stays
    adult_count = Column(Integer, nullable=False, default=2)
    child_count = Column(Integer, nullable=False, default=0)
    requires_id_proof = Column(Boolean, nullable=False, default=True)

    total_bookings = Column(Integer, nullable=False, default=0)
    total_revenue = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    average_rating = Column(Float, nullable=False, default=0)
    review_count = Column(Integer, nullable=False, default=0)

    version = Column(Integer, nullable=False, default=1)

    owner = relationship("User", back_populates="hotels")
    bookings = relationship("Booking", back_populates="hotel")

    __table_args__ = (
        CheckConstraint("price_per_night >= 0", name="check_price_per_night_non_negative"),
        CheckConstraint("adult_count > 0", name="check_hotel_adult_capacity_positive"),
        CheckConstraint("child_count >= 0", name="check_hotel_child_capacity_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Hotel(id={self.id}, name={self.name}, city={self.city})>"
