"""
Stay pricing.

Nightly stays bill per started day, hourly stays per started hour, with a
minimum of one unit: 25 hours nightly is 2 nights, 90 minutes hourly is
2 hours.
"""

import math
from datetime import datetime

from hotel_booking.core.exceptions import BookingValidationError
from hotel_booking.models.booking import BookingType

SECONDS_PER_UNIT = {
    BookingType.NIGHTLY: 24 * 60 * 60,
    BookingType.HOURLY: 60 * 60,
}


def billable_units(check_in: datetime, check_out: datetime, booking_type: BookingType) -> int:
    seconds = (check_out - check_in).total_seconds()
    return max(1, math.ceil(seconds / SECONDS_PER_UNIT[booking_type]))


def unit_price(hotel, booking_type: BookingType) -> float:
    if booking_type == BookingType.HOURLY:
        if hotel.price_per_hour is None:
            raise BookingValidationError("This hotel does not offer hourly stays")
        return float(hotel.price_per_hour)
    return float(hotel.price_per_night)


def total_cost(hotel, check_in: datetime, check_out: datetime, booking_type: BookingType) -> float:
    units = billable_units(check_in, check_out, booking_type)
    return round(unit_price(hotel, booking_type) * units, 2)
