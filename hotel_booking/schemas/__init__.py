from hotel_booking.schemas.booking import (
    AvailabilityCheckResponse,
    BookedRangeResponse,
    BookingCancelRequest,
    BookingCreate,
    BookingResponse,
    IdReviewDecision,
    IdReviewRequest,
)
from hotel_booking.schemas.guest import GuestResponse
from hotel_booking.schemas.analytics import DashboardResponse, ForecastResponse
from hotel_booking.schemas.review import ReviewCreate, ReviewResponse
from hotel_booking.schemas.hotel import HotelCountersResponse

__all__ = [
    "AvailabilityCheckResponse", "BookedRangeResponse", "BookingCancelRequest", "BookingCreate", "BookingResponse",
    "IdReviewDecision", "IdReviewRequest",
    "GuestResponse", "DashboardResponse", "ForecastResponse",
    "ReviewCreate", "ReviewResponse", "HotelCountersResponse",
]
