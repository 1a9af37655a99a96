"""
Guest review of a completed stay. One review per booking, enforced by a
unique constraint as well as by the service check.
"""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, Text, UniqueConstraint

from hotel_booking.db.base import Base, TimestampMixin

CATEGORY_FIELDS = ("cleanliness", "service", "location", "value", "amenities")


class Review(Base, TimestampMixin):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id"), nullable=False, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)

    cleanliness = Column(Integer, nullable=False)
    service = Column(Integer, nullable=False)
    location = Column(Integer, nullable=False)
    value = Column(Integer, nullable=False)
    amenities = Column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("booking_id", name="uq_review_booking"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="check_review_rating_range"),
    )

    @property
    def categories(self) -> dict:
        return {field: getattr(self, field) for field in CATEGORY_FIELDS}

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, hotel={self.hotel_id}, rating={self.rating})>"
