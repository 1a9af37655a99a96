"""
Concurrent booking creation against one hotel.

Every contender runs in its own session and transaction, the way parallel
API requests do, so the hotel version check is what decides the winner.
"""

import asyncio
from datetime import datetime, timezone, timedelta

import pytest
from sqlalchemy import func, select

from hotel_booking.core.exceptions import DatesUnavailableError
from hotel_booking.models.booking import Booking
from hotel_booking.models.hotel import Hotel
from hotel_booking.models.user import User, UserRole
from hotel_booking.schemas.booking import BookingCreate
from hotel_booking.services import booking_service
from hotel_booking.services.booking_service import create_booking
from hotel_booking.services.interfaces.dummy_payment import DummyPaymentProcessor

CHECK_IN = (datetime.now(timezone.utc) + timedelta(days=45)).replace(hour=14, minute=0, second=0, microsecond=0)


async def _guests(db_session, count):
    guests = [
        User(email=f"guest{n}@example.com", first_name="Guest", last_name=str(n), role=UserRole.USER.value)
        for n in range(count)
    ]
    db_session.add_all(guests)
    await db_session.commit()
    return [g.id for g in guests]


async def _attempt(session_factory, user_id, hotel_id, data):
    async with session_factory() as session:
        try:
            booking = await create_booking(session, user_id, hotel_id, data, DummyPaymentProcessor())
            await session.commit()
            return booking.id
        except DatesUnavailableError:
            await session.rollback()
            return None


@pytest.mark.asyncio
async def test_same_dates_exactly_one_winner(session_factory, db_session, hotel):
    """Five guests race for the same night; one booking, four conflicts."""
    user_ids = await _guests(db_session, 5)
    data = BookingCreate(check_in=CHECK_IN, check_out=CHECK_IN + timedelta(days=1), adult_count=1)

    results = await asyncio.gather(*[_attempt(session_factory, uid, hotel.id, data) for uid in user_ids])

    winners = [r for r in results if r is not None]
    assert len(winners) == 1

    active = await db_session.scalar(select(func.count(Booking.id)).where(Booking.hotel_id == hotel.id))
    assert active == 1
    counters = (await db_session.execute(
        select(Hotel.total_bookings, Hotel.version).where(Hotel.id == hotel.id)
    )).one()
    assert counters.total_bookings == 1
    assert counters.version == 2


@pytest.mark.asyncio
async def test_overlapping_ranges_exactly_one_winner(session_factory, db_session, hotel):
    """Staggered multi-night stays that all share the third night."""
    user_ids = await _guests(db_session, 3)
    requests = [
        BookingCreate(check_in=CHECK_IN + timedelta(days=offset), check_out=CHECK_IN + timedelta(days=offset + 3), adult_count=1)
        for offset in range(3)
    ]

    results = await asyncio.gather(*[
        _attempt(session_factory, uid, hotel.id, data) for uid, data in zip(user_ids, requests)
    ])
    assert len([r for r in results if r is not None]) == 1


@pytest.mark.asyncio
async def test_disjoint_ranges_all_succeed(session_factory, db_session, hotel, monkeypatch):
    """Contention on the version retries; it never rejects free dates."""
    monkeypatch.setattr(booking_service.settings, "BOOKING_MAX_RETRY_ATTEMPTS", 10)
    user_ids = await _guests(db_session, 4)
    requests = [
        BookingCreate(check_in=CHECK_IN + timedelta(days=2 * n), check_out=CHECK_IN + timedelta(days=2 * n + 1), adult_count=1)
        for n in range(4)
    ]

    results = await asyncio.gather(*[
        _attempt(session_factory, uid, hotel.id, data) for uid, data in zip(user_ids, requests)
    ])
    assert all(r is not None for r in results)

    counters = (await db_session.execute(
        select(Hotel.total_bookings, Hotel.total_revenue).where(Hotel.id == hotel.id)
    )).one()
    assert counters.total_bookings == 4
    assert counters.total_revenue == 20000
