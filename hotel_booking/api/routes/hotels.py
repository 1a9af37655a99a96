"""
Public hotel endpoints: availability calendar and booking creation.
"""

import time
from datetime import datetime

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.core.metrics import booking_latency
from hotel_booking.core.security import get_current_user_id
from hotel_booking.db.session import get_db
from hotel_booking.models.booking import BookingType
from hotel_booking.schemas.booking import AvailabilityCheckResponse, BookedRangeResponse, BookingCreate, BookingResponse
from hotel_booking.services.availability import is_range_free, list_booked_ranges
from hotel_booking.services.booking_service import create_booking
from hotel_booking.services.cache_service import invalidate_analytics_cache
from hotel_booking.services.interfaces.payment import PaymentProcessor
from hotel_booking.services.strategy_factory import get_payment_processor

router = APIRouter(prefix="/hotels", tags=["Hotels"])


@router.get("/{hotel_id}/availability", response_model=list[BookedRangeResponse])
async def availability_endpoint(hotel_id: int, db: AsyncSession = Depends(get_db)):
    """
    Booked intervals for the hotel's calendar.
    Cancelled, rejected and refunded bookings are not listed.
    """
    return await list_booked_ranges(db, hotel_id)


@router.get("/{hotel_id}/availability/check", response_model=AvailabilityCheckResponse)
async def availability_check_endpoint(
    hotel_id: int,
    check_in: datetime,
    check_out: datetime,
    booking_type: BookingType = BookingType.NIGHTLY,
    db: AsyncSession = Depends(get_db),
):
    """Advisory: a free range can still be taken before the booking request lands."""
    available = await is_range_free(db, hotel_id, check_in, check_out, booking_type)
    return AvailabilityCheckResponse(
        check_in=check_in, check_out=check_out, booking_type=booking_type, available=available
    )


@router.post("/{hotel_id}/bookings", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking_endpoint(
    hotel_id: int,
    booking_data: BookingCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    payment: PaymentProcessor = Depends(get_payment_processor),
):
    """
    Reserve a nightly or hourly stay.

    The overlap check is repeated under the hotel's optimistic lock, so two
    simultaneous requests for overlapping dates cannot both succeed; the
    loser gets a 409.
    """
    started = time.perf_counter()
    try:
        booking = await create_booking(db, user_id, hotel_id, booking_data, payment)
    finally:
        booking_latency.observe(time.perf_counter() - started)
    await db.commit()
    await invalidate_analytics_cache()
    return booking
