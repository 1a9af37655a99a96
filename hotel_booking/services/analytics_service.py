"""
Owner analytics: dashboard aggregation and short-horizon forecasting.

Both are pure functions over an in-memory list of the owner's bookings,
evaluated at an explicit `now` so they can be tested without a clock.
The async wrappers at the bottom fetch the data.

Capacity model
--------------
Occupancy assumes every hotel has ASSUMED_ROOMS_PER_HOTEL rooms over a
30-day window and counts one room-night per non-cancelled booking. It is a
deliberately coarse indicator, not a room-night ledger.

Forecast model
--------------
Bookings from the last 60 days are bucketed into Sunday-start weeks and an
ordinary least-squares line is fitted to each weekly series (bookings and
revenue independently) with x = 0..n-1:

    Σx  = n(n-1)/2
    Σx² = n(n-1)(2n-1)/6
    slope     = (nΣxy - ΣxΣy) / (nΣx² - (Σx)²)
    intercept = (Σy - slope·Σx) / n

The next 4 weeks are projected at x = n .. n+3, clamped at zero.
"""

import math
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.core.clock import as_utc, utcnow
from hotel_booking.models.booking import Booking, BookingStatus
from hotel_booking.models.hotel import Hotel
from hotel_booking.services.booking_service import get_owner_bookings

ASSUMED_ROOMS_PER_HOTEL = 10
WINDOW_DAYS = 30
HISTORY_DAYS = 60
FORECAST_WEEKS = 4
CONFIDENCE_FLOOR = 0.6
MAX_DESTINATIONS = 5
MAX_HOTEL_PERFORMANCE = 10
MAX_INSIGHTS = 4

S = BookingStatus
STATUS_BUCKETS = (
    ("Confirmed", frozenset({S.CONFIRMED.value, S.PAYMENT_DONE.value})),
    ("Pending", frozenset({S.ID_PENDING.value, S.ID_SUBMITTED.value})),
    ("Completed", frozenset({S.COMPLETED.value})),
    ("Cancelled", frozenset({S.CANCELLED.value, S.REJECTED.value})),
)
CANCELLED_LIKE = frozenset({S.CANCELLED.value, S.REJECTED.value})


@dataclass(frozen=True)
class BookingFact:
    hotel_id: int
    user_id: int
    total_cost: float
    status: str
    created_at: datetime


@dataclass(frozen=True)
class HotelFact:
    id: int
    name: str
    city: str
    price_per_night: float


@dataclass(frozen=True)
class Trend:
    slope: float
    intercept: float


def round_half_up(value: float, places: int = 0) -> float:
    """Halves go up, matching the dashboard's published figures; the builtin round() sends them to even."""
    scale = 10 ** places
    return math.floor(value * scale + 0.5) / scale


# -- dashboard -------------------------------------------------------------


def revenue_growth(current: float, previous: float) -> float:
    """Month-over-month growth in percent; 100 when there is no baseline."""
    if previous > 0:
        return (current - previous) / previous * 100
    if current > 0:
        return 100.0
    return 0.0


def month_bounds(now: datetime) -> tuple[datetime, datetime]:
    """Start of the current and of the previous calendar month."""
    current = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    previous = (current - timedelta(days=1)).replace(day=1)
    return current, previous


def status_breakdown(bookings: Iterable[BookingFact]) -> list[dict]:
    statuses = [b.status for b in bookings]
    buckets = [
        {"name": name, "value": sum(1 for s in statuses if s in members)}
        for name, members in STATUS_BUCKETS
    ]
    return [bucket for bucket in buckets if bucket["value"] > 0]


def occupancy_rate(booked_count: int, hotel_count: int) -> float:
    potential = hotel_count * ASSUMED_ROOMS_PER_HOTEL * WINDOW_DAYS
    if potential <= 0:
        return 0.0
    return booked_count / potential * 100


def daily_series(bookings: Sequence[BookingFact], now: datetime) -> list[dict]:
    """Trailing 30 calendar days, oldest first, bucketed by creation date."""
    per_day: dict[date, list[float]] = {}
    for b in bookings:
        per_day.setdefault(b.created_at.date(), []).append(b.total_cost)

    series = []
    for offset in range(WINDOW_DAYS - 1, -1, -1):
        day = (now - timedelta(days=offset)).date()
        costs = per_day.get(day, [])
        series.append({"date": day.isoformat(), "bookings": len(costs), "revenue": round_half_up(sum(costs), 2)})
    return series


def popular_destinations(hotels: Sequence[HotelFact], bookings: Sequence[BookingFact]) -> list[dict]:
    """Booked cities by booking count; avg_price is the mean nightly price of the booked hotels."""
    hotels_by_id = {h.id: h for h in hotels}
    per_city: "OrderedDict[str, dict]" = OrderedDict()
    for b in bookings:
        hotel = hotels_by_id.get(b.hotel_id)
        if hotel is None:
            continue
        city = per_city.setdefault(hotel.city, {"count": 0, "revenue": 0.0, "hotels": {}})
        city["count"] += 1
        city["revenue"] += b.total_cost
        city["hotels"][hotel.id] = hotel.price_per_night

    destinations = [
        {
            "city": name,
            "count": data["count"],
            "total_revenue": round_half_up(data["revenue"], 2),
            "avg_price": round_half_up(sum(data["hotels"].values()) / len(data["hotels"]), 2),
        }
        for name, data in per_city.items()
    ]
    destinations.sort(key=lambda d: d["count"], reverse=True)
    return destinations[:MAX_DESTINATIONS]


def hotel_performance(hotels: Sequence[HotelFact], bookings: Sequence[BookingFact]) -> list[dict]:
    rows = []
    for hotel in hotels:
        own = [b for b in bookings if b.hotel_id == hotel.id]
        rows.append({
            "hotel_id": hotel.id,
            "name": hotel.name,
            "city": hotel.city,
            "price_per_night": hotel.price_per_night,
            "booking_count": len(own),
            "total_revenue": round_half_up(sum(b.total_cost for b in own), 2),
            "cancelled_count": sum(1 for b in own if b.status in CANCELLED_LIKE),
            "occupancy": round_half_up(len(own) / WINDOW_DAYS * 100, 1),
        })
    rows.sort(key=lambda r: r["total_revenue"], reverse=True)
    return rows[:MAX_HOTEL_PERFORMANCE]


def build_insights(growth: float, occupancy: float, performance: Sequence[dict]) -> list[dict]:
    insights = []
    if growth > 10:
        insights.append({
            "type": "success",
            "message": f"Your revenue increased by {growth:.1f}% compared to last month!",
        })
    if occupancy < 20:
        insights.append({
            "type": "warning",
            "message": "Occupancy rate is low this month. Consider running promotions.",
        })
    for row in performance:
        if row["cancelled_count"] > 2:
            insights.append({
                "type": "error",
                "message": f"High cancellation rate for {row['name']}. Check your policies.",
            })
    return insights[:MAX_INSIGHTS]


def build_dashboard(hotels: Sequence[HotelFact], bookings: Sequence[BookingFact], now: datetime) -> dict:
    window_start = now - timedelta(days=WINDOW_DAYS)
    current_month, previous_month = month_bounds(now)

    recent = [b for b in bookings if b.created_at >= window_start]
    current_revenue = sum(b.total_cost for b in bookings if b.created_at >= current_month)
    previous_revenue = sum(
        b.total_cost for b in bookings if previous_month <= b.created_at < current_month
    )
    growth = revenue_growth(current_revenue, previous_revenue)

    not_cancelled = sum(1 for b in bookings if b.status != S.CANCELLED.value)
    occupancy = occupancy_rate(not_cancelled, len(hotels))
    performance = hotel_performance(hotels, bookings)

    return {
        "overview": {
            "total_hotels": len(hotels),
            "total_guests": len({b.user_id for b in bookings}),
            "total_bookings": len(bookings),
            "recent_bookings": len(recent),
            "total_revenue": round_half_up(sum(b.total_cost for b in bookings), 2),
            "recent_revenue": round_half_up(sum(b.total_cost for b in recent), 2),
            "revenue_growth": round_half_up(growth, 2),
            "occupancy_rate": round_half_up(occupancy, 1),
            "cancelled_bookings": sum(1 for b in recent if b.status in CANCELLED_LIKE),
        },
        "status_breakdown": status_breakdown(bookings),
        "popular_destinations": popular_destinations(hotels, bookings),
        "daily_bookings": daily_series(bookings, now),
        "hotel_performance": performance,
        "insights": build_insights(growth, occupancy, performance),
        "last_updated": now,
    }


# -- forecast --------------------------------------------------------------


def week_start(moment: datetime) -> date:
    """The Sunday on or before `moment`'s date."""
    day = moment.date()
    return day - timedelta(days=(day.weekday() + 1) % 7)


def weekly_series(bookings: Iterable[BookingFact], now: datetime) -> list[dict]:
    cutoff = now - timedelta(days=HISTORY_DAYS)
    weeks: dict[date, dict] = {}
    for b in bookings:
        if b.created_at < cutoff:
            continue
        key = week_start(b.created_at)
        week = weeks.setdefault(key, {"week": key.isoformat(), "bookings": 0, "revenue": 0.0})
        week["bookings"] += 1
        week["revenue"] += b.total_cost

    return [
        {**weeks[key], "revenue": round_half_up(weeks[key]["revenue"], 2)}
        for key in sorted(weeks)
    ]


def linear_trend(values: Sequence[float]) -> Trend:
    """Closed-form OLS over x = 0..n-1; flat at the mean when degenerate."""
    n = len(values)
    if n == 0:
        return Trend(slope=0.0, intercept=0.0)
    sum_y = float(sum(values))
    if n < 2:
        return Trend(slope=0.0, intercept=sum_y / n)

    sum_x = n * (n - 1) / 2
    sum_xx = n * (n - 1) * (2 * n - 1) / 6
    sum_xy = float(sum(index * value for index, value in enumerate(values)))

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return Trend(slope=0.0, intercept=sum_y / n)

    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n
    return Trend(slope=slope, intercept=intercept)


def confidence(weeks_ahead: int) -> float:
    return round_half_up(max(CONFIDENCE_FLOOR, 1 - 0.1 * weeks_ahead), 2)


def trend_label(trend: Trend, points: int) -> str:
    if points < 2:
        return "stable"
    return "increasing" if trend.slope > 0 else "decreasing"


def project(historical: Sequence[dict], now: datetime) -> list[dict]:
    n = len(historical)
    booking_trend = linear_trend([w["bookings"] for w in historical])
    revenue_trend = linear_trend([w["revenue"] for w in historical])

    forecasts = []
    for ahead in range(1, FORECAST_WEEKS + 1):
        index = n + ahead - 1
        if n > 1:
            bookings = max(0, round_half_up(booking_trend.slope * index + booking_trend.intercept))
            revenue = max(0.0, revenue_trend.slope * index + revenue_trend.intercept)
        elif n == 1:
            bookings = historical[0]["bookings"]
            revenue = historical[0]["revenue"]
        else:
            bookings, revenue = 0, 0.0

        forecasts.append({
            "week": (now + timedelta(weeks=ahead)).date().isoformat(),
            "bookings": int(bookings),
            "revenue": round_half_up(revenue, 2),
            "confidence": confidence(ahead),
        })
    return forecasts


def build_forecast(bookings: Sequence[BookingFact], now: datetime) -> dict:
    historical = weekly_series(bookings, now)
    n = len(historical)
    return {
        "historical": historical,
        "forecasts": project(historical, now),
        "seasonal_growth": 0,
        "trends": {
            "booking_trend": trend_label(linear_trend([w["bookings"] for w in historical]), n),
            "revenue_trend": trend_label(linear_trend([w["revenue"] for w in historical]), n),
        },
        "last_updated": now,
    }


# -- data access -----------------------------------------------------------


def _booking_fact(booking: Booking) -> BookingFact:
    return BookingFact(
        hotel_id=booking.hotel_id,
        user_id=booking.user_id,
        total_cost=float(booking.total_cost or 0),
        status=booking.status,
        created_at=as_utc(booking.created_at),
    )


async def _owner_facts(db: AsyncSession, owner_id: int) -> tuple[list[HotelFact], list[BookingFact]]:
    result = await db.execute(select(Hotel).where(Hotel.owner_id == owner_id).order_by(Hotel.id))
    hotels = [
        HotelFact(id=h.id, name=h.name, city=h.city, price_per_night=float(h.price_per_night))
        for h in result.scalars().all()
    ]
    bookings = [_booking_fact(b) for b in await get_owner_bookings(db, owner_id)]
    return hotels, bookings


async def dashboard_summary(db: AsyncSession, owner_id: int, now: Optional[datetime] = None) -> dict:
    hotels, bookings = await _owner_facts(db, owner_id)
    return build_dashboard(hotels, bookings, as_utc(now) if now else utcnow())


async def forecast(db: AsyncSession, owner_id: int, now: Optional[datetime] = None) -> dict:
    _, bookings = await _owner_facts(db, owner_id)
    return build_forecast(bookings, as_utc(now) if now else utcnow())
