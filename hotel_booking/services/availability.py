"""
Availability checker.

OVERLAP RULE
============

Intervals are half-open: a stay occupies [check_in, check_out). A candidate
[a, b) conflicts with an existing booking [c, d) iff

    a < d AND b > c

so a stay ending at 11:00 and another starting at 11:00 do not conflict,
which allows back-to-back bookings. Bookings in a voided status
(CANCELLED, REJECTED, REFUNDED) never block anything.

The read-only check here is advisory. The authoritative check runs again
inside booking creation under the hotel's optimistic lock.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.core.clock import as_utc
from hotel_booking.core.exceptions import BookingValidationError
from hotel_booking.models.booking import Booking, BookingStatus, BookingType

VOID_STATUSES = frozenset({
    BookingStatus.CANCELLED.value,
    BookingStatus.REJECTED.value,
    BookingStatus.REFUNDED.value,
})

MIN_HOURLY_DURATION = timedelta(hours=1)


@dataclass(frozen=True)
class BookedRange:
    check_in: datetime
    check_out: datetime
    booking_type: str


def validate_interval(check_in: datetime, check_out: datetime, booking_type: BookingType) -> None:
    """Naive datetimes are read as UTC."""
    check_in, check_out = as_utc(check_in), as_utc(check_out)
    if check_out <= check_in:
        raise BookingValidationError("check_out must be after check_in")
    if booking_type == BookingType.HOURLY and check_out - check_in < MIN_HOURLY_DURATION:
        raise BookingValidationError("Hourly bookings must last at least 1 hour")


def conflict_query(hotel_id: int, check_in: datetime, check_out: datetime):
    """SELECT of active bookings for the hotel overlapping [check_in, check_out)."""
    return (
        select(Booking.id)
        .where(
            Booking.hotel_id == hotel_id,
            Booking.status.not_in(VOID_STATUSES),
            Booking.check_in < check_out,
            Booking.check_out > check_in,
        )
        .limit(1)
    )


async def list_booked_ranges(db: AsyncSession, hotel_id: int) -> list[BookedRange]:
    """Active intervals for a hotel, ordered by check-in, for calendar rendering."""
    result = await db.execute(
        select(Booking.check_in, Booking.check_out, Booking.booking_type)
        .where(Booking.hotel_id == hotel_id, Booking.status.not_in(VOID_STATUSES))
        .order_by(Booking.check_in.asc())
    )
    return [
        BookedRange(check_in=as_utc(row.check_in), check_out=as_utc(row.check_out), booking_type=row.booking_type)
        for row in result.all()
    ]


async def is_range_free(
    db: AsyncSession,
    hotel_id: int,
    check_in: datetime,
    check_out: datetime,
    booking_type: BookingType = BookingType.NIGHTLY,
) -> bool:
    """
    Advisory availability check. Requests that are invalid on their own
    (hourly stays under one hour, empty intervals) are never free.
    """
    try:
        validate_interval(check_in, check_out, booking_type)
    except BookingValidationError:
        return False
    result = await db.execute(conflict_query(hotel_id, as_utc(check_in), as_utc(check_out)))
    return result.scalar_one_or_none() is None
