"""
Booking model: a guest's reservation of a hotel for a time interval.

Key design decisions:
- Guest contact fields are a snapshot taken at booking time, not a reference
- The ID-proof sub-record lives in `id_proof_*` columns of the same row so
  that every lifecycle transition is a single-row conditional UPDATE
- Bookings are never deleted; voided ones keep their interval for history
- Composite (hotel_id, check_in) index backs the overlap query
"""

import enum

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from hotel_booking.db.base import Base, TimestampMixin


class BookingStatus(str, enum.Enum):
    PAYMENT_DONE = "PAYMENT_DONE"
    ID_PENDING = "ID_PENDING"
    ID_SUBMITTED = "ID_SUBMITTED"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
    REFUND_PENDING = "REFUND_PENDING"
    REFUNDED = "REFUNDED"


class BookingType(str, enum.Enum):
    NIGHTLY = "nightly"
    HOURLY = "hourly"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class IdType(str, enum.Enum):
    AADHAAR = "Aadhaar"
    PASSPORT = "Passport"
    DRIVING_LICENSE = "Driving License"
    VOTER_ID = "Voter ID"


class IdProofStatus(str, enum.Enum):
    PENDING = "PENDING"
    SUBMITTED = "SUBMITTED"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


def _in(column: str, enum_cls) -> str:
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return f"{column} IN ({values})"


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id"), nullable=False, index=True)

    # Contact snapshot
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=True)

    adult_count = Column(Integer, nullable=False)
    child_count = Column(Integer, nullable=False, default=0)

    check_in = Column(DateTime(timezone=True), nullable=False, index=True)
    check_out = Column(DateTime(timezone=True), nullable=False)
    booking_type = Column(String(10), nullable=False, default=BookingType.NIGHTLY.value)

    total_cost = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.ID_PENDING.value, index=True)
    payment_status = Column(String(10), nullable=False, default=PaymentStatus.PENDING.value, index=True)
    payment_method = Column(String(50), nullable=True)
    payment_reference = Column(String(100), nullable=True)
    refund_amount = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)

    special_requests = Column(Text, nullable=True)
    cancellation_reason = Column(String(500), nullable=True)
    rejection_reason = Column(String(500), nullable=True)

    id_proof_type = Column(String(20), nullable=True)
    id_proof_front_image = Column(Text, nullable=True)
    id_proof_back_image = Column(Text, nullable=True)
    id_proof_status = Column(String(10), nullable=False, default=IdProofStatus.PENDING.value)
    id_proof_uploaded_at = Column(DateTime(timezone=True), nullable=True)
    id_proof_verified_at = Column(DateTime(timezone=True), nullable=True)
    id_proof_rejection_reason = Column(String(500), nullable=True)

    user = relationship("User")
    hotel = relationship("Hotel", back_populates="bookings", lazy="selectin")

    __table_args__ = (
        CheckConstraint("check_out > check_in", name="check_booking_interval_positive"),
        CheckConstraint("adult_count >= 1", name="check_booking_adults_positive"),
        CheckConstraint("child_count >= 0", name="check_booking_children_non_negative"),
        CheckConstraint("total_cost >= 0", name="check_booking_cost_non_negative"),
        CheckConstraint(_in("status", BookingStatus), name="check_booking_status"),
        CheckConstraint(_in("payment_status", PaymentStatus), name="check_booking_payment_status"),
        CheckConstraint(_in("booking_type", BookingType), name="check_booking_type"),
        CheckConstraint(_in("id_proof_status", IdProofStatus), name="check_booking_id_proof_status"),
        Index("ix_bookings_hotel_check_in", "hotel_id", "check_in"),
        Index("ix_bookings_user_created", "user_id", "created_at"),
        Index("ix_bookings_status_created", "status", "created_at"),
    )

    @property
    def id_proof(self) -> dict:
        return {
            "id_type": self.id_proof_type,
            "front_image": self.id_proof_front_image,
            "back_image": self.id_proof_back_image,
            "status": self.id_proof_status,
            "uploaded_at": self.id_proof_uploaded_at,
            "verified_at": self.id_proof_verified_at,
            "rejection_reason": self.id_proof_rejection_reason,
        }

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, hotel={self.hotel_id}, user={self.user_id}, status={self.status})>"
