"""
Tests for stay completion: explicit owner action and the periodic sweep.
"""

from datetime import datetime, timezone, timedelta

import pytest
from httpx import AsyncClient

from hotel_booking.core.exceptions import NotFoundOrIllegalStateError
from hotel_booking.core.security import CurrentUser
from hotel_booking.models.user import UserRole
from hotel_booking.services.booking_service import complete_booking, complete_past_bookings

AFTER_STAY = datetime.now(timezone.utc) + timedelta(days=365)


async def _confirmed(client, book, upload_id, guest_headers, owner_headers, hotel, payload):
    booking = (await book(hotel.id, guest_headers, payload)).json()
    await upload_id(booking["id"], guest_headers)
    await client.patch(
        f"/api/v1/bookings/{booking['id']}/verify-id", json={"action": "approve"}, headers=owner_headers
    )
    return booking


@pytest.mark.asyncio
async def test_complete_before_check_out(
    client: AsyncClient, book, upload_id, guest_headers, owner_headers, hotel, make_stay
):
    booking = await _confirmed(client, book, upload_id, guest_headers, owner_headers, hotel, make_stay())
    response = await client.post(f"/api/v1/bookings/{booking['id']}/complete", headers=owner_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_complete_after_check_out(
    client: AsyncClient, db_session, book, upload_id, guest_headers, owner, owner_headers, hotel, make_stay
):
    booking = await _confirmed(client, book, upload_id, guest_headers, owner_headers, hotel, make_stay())

    actor = CurrentUser(id=owner.id, role=UserRole.HOTEL_OWNER)
    completed = await complete_booking(db_session, booking["id"], actor, now=AFTER_STAY)
    await db_session.commit()
    assert completed.status == "COMPLETED"

    cancel = await client.post(f"/api/v1/my-bookings/{booking['id']}/cancel", headers=guest_headers)
    assert cancel.status_code == 404


@pytest.mark.asyncio
async def test_complete_requires_confirmation(db_session, book, guest_headers, owner, hotel, make_stay):
    """A booking still waiting for ID proof cannot be completed."""
    booking = (await book(hotel.id, guest_headers, make_stay())).json()
    actor = CurrentUser(id=owner.id, role=UserRole.HOTEL_OWNER)
    with pytest.raises(NotFoundOrIllegalStateError):
        await complete_booking(db_session, booking["id"], actor, now=AFTER_STAY)


@pytest.mark.asyncio
async def test_sweep_completes_only_finished_stays(
    client: AsyncClient, db_session, book, upload_id, guest_headers, owner_headers, hotel, express_hotel, make_stay
):
    confirmed = await _confirmed(
        client, book, upload_id, guest_headers, owner_headers, hotel, make_stay(start_day=0)
    )
    paid = (await book(express_hotel.id, guest_headers, make_stay(start_day=0))).json()
    pending = (await book(hotel.id, guest_headers, make_stay(start_day=5))).json()
    far_future = (await book(express_hotel.id, guest_headers, make_stay(start_day=400))).json()

    completed = await complete_past_bookings(db_session, now=AFTER_STAY)
    await db_session.commit()
    assert completed == 2

    bookings = {b["id"]: b for b in (await client.get("/api/v1/my-bookings/", headers=guest_headers)).json()}
    assert bookings[confirmed["id"]]["status"] == "COMPLETED"
    assert bookings[paid["id"]]["status"] == "COMPLETED"
    assert bookings[pending["id"]]["status"] == "ID_PENDING"
    assert bookings[far_future["id"]]["status"] == "PAYMENT_DONE"
