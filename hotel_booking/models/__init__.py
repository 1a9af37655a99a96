from hotel_booking.models.user import User, UserRole
from hotel_booking.models.hotel import Hotel
from hotel_booking.models.booking import (
    Booking,
    BookingStatus,
    BookingType,
    IdProofStatus,
    IdType,
    PaymentStatus,
)
from hotel_booking.models.review import Review

__all__ = [
    "User", "UserRole", "Hotel", "Review",
    "Booking", "BookingStatus", "BookingType", "IdProofStatus", "IdType", "PaymentStatus",
]
