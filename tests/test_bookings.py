"""
Tests for booking creation, cancellation and the guest's booking list.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from hotel_booking.api.routes import hotels as hotel_routes, my_bookings as my_booking_routes
from hotel_booking.models.booking import Booking
from hotel_booking.models.hotel import Hotel
from hotel_booking.models.user import User


@pytest.mark.asyncio
async def test_create_booking(book, guest, guest_headers, hotel, make_stay):
    """A two-night stay waits for ID proof, is paid and priced per night."""
    response = await book(hotel.id, guest_headers, make_stay(nights=2, special_requests="Late arrival"))
    assert response.status_code == 201
    data = response.json()
    assert data["hotel_id"] == hotel.id
    assert data["user_id"] == guest.id
    assert data["status"] == "ID_PENDING"
    assert data["payment_status"] == "paid"
    assert data["total_cost"] == 10000
    assert data["refund_amount"] == 0
    assert data["special_requests"] == "Late arrival"
    assert data["id_proof"]["status"] == "PENDING"
    assert data["hotel"]["name"] == "Lakeview Inn"


@pytest.mark.asyncio
async def test_contact_snapshot_defaults_to_profile(book, guest_headers, hotel, make_stay):
    response = await book(hotel.id, guest_headers, make_stay())
    data = response.json()
    assert (data["first_name"], data["last_name"], data["email"]) == ("Asha", "Rao", "asha@example.com")
    assert data["phone"] == "+91 98765 43210"

    response = await book(hotel.id, guest_headers, make_stay(start_day=5, first_name="Anita", email="anita@example.com"))
    data = response.json()
    assert data["first_name"] == "Anita"
    assert data["last_name"] == "Rao"
    assert data["email"] == "anita@example.com"


@pytest.mark.asyncio
async def test_hotel_without_id_check_starts_paid(book, guest_headers, express_hotel, make_stay):
    response = await book(express_hotel.id, guest_headers, make_stay())
    assert response.status_code == 201
    assert response.json()["status"] == "PAYMENT_DONE"
    assert response.json()["total_cost"] == 2000


@pytest.mark.asyncio
async def test_book_unauthenticated(client: AsyncClient, hotel, make_stay):
    response = await client.post(f"/api/v1/hotels/{hotel.id}/bookings", json=make_stay())
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_book_unknown_hotel(book, guest_headers, make_stay):
    response = await book(999, guest_headers, make_stay())
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND_OR_ILLEGAL_STATE"


@pytest.mark.asyncio
async def test_back_to_back_stays_allowed(book, guest_headers, other_guest_headers, hotel, make_stay):
    """Check-out at 14:00 and check-in at 14:00 the same day do not conflict."""
    first = await book(hotel.id, guest_headers, make_stay(start_day=0, nights=2))
    second = await book(hotel.id, other_guest_headers, make_stay(start_day=2, nights=1))
    before = await book(hotel.id, other_guest_headers, make_stay(start_day=-1, nights=1))
    assert first.status_code == 201
    assert second.status_code == 201
    assert before.status_code == 201


@pytest.mark.asyncio
async def test_overlapping_stay_rejected(book, guest_headers, other_guest_headers, hotel, make_stay):
    """Any overlap with an active booking is a conflict, not a retryable failure."""
    first = await book(hotel.id, guest_headers, make_stay(start_day=0, nights=3))
    assert first.status_code == 201

    overlap = await book(hotel.id, other_guest_headers, make_stay(start_day=2, nights=2))
    assert overlap.status_code == 409
    body = overlap.json()
    assert body["code"] == "DATES_UNAVAILABLE"
    assert body["retryable"] is False

    hourly_inside = await book(hotel.id, other_guest_headers, make_stay(start_day=1, hours=2))
    assert hourly_inside.status_code == 409


@pytest.mark.asyncio
async def test_reversed_interval_rejected(book, guest_headers, hotel, make_stay):
    payload = make_stay()
    payload["check_in"], payload["check_out"] = payload["check_out"], payload["check_in"]
    response = await book(hotel.id, guest_headers, payload)
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_empty_interval_rejected(book, guest_headers, hotel, make_stay):
    payload = make_stay()
    payload["check_out"] = payload["check_in"]
    response = await book(hotel.id, guest_headers, payload)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_hourly_stay_under_one_hour_rejected(book, guest_headers, hotel, make_stay):
    response = await book(hotel.id, guest_headers, make_stay(hours=0.5))
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_hourly_stay_priced_per_started_hour(book, guest_headers, hotel, make_stay):
    """90 minutes bills as two hours."""
    response = await book(hotel.id, guest_headers, make_stay(hours=1.5))
    assert response.status_code == 201
    assert response.json()["booking_type"] == "hourly"
    assert response.json()["total_cost"] == 1000


@pytest.mark.asyncio
async def test_hourly_stay_at_nightly_only_hotel(book, guest_headers, express_hotel, make_stay):
    response = await book(express_hotel.id, guest_headers, make_stay(hours=2))
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_occupancy_over_capacity(book, guest_headers, hotel, make_stay):
    response = await book(hotel.id, guest_headers, make_stay(adult_count=5))
    assert response.status_code == 422

    response = await book(hotel.id, guest_headers, make_stay(adult_count=0))
    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["retryable"] is False
    assert "adult_count" in body["detail"]


@pytest.mark.asyncio
async def test_malformed_body_uses_error_contract(client: AsyncClient, guest_headers, hotel):
    response = await client.post(
        f"/api/v1/hotels/{hotel.id}/bookings",
        content=b"{check_in: tomorrow",
        headers={**guest_headers, "Content-Type": "application/json"},
    )
    assert response.status_code == 422
    assert set(response.json()) == {"detail", "code", "retryable"}
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_cancel_booking(client: AsyncClient, book, guest_headers, hotel, make_stay):
    """Cancellation refunds the full cost and frees the dates."""
    booking = (await book(hotel.id, guest_headers, make_stay(nights=2))).json()

    response = await client.post(f"/api/v1/my-bookings/{booking['id']}/cancel", headers=guest_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "CANCELLED"
    assert data["payment_status"] == "refunded"
    assert data["refund_amount"] == booking["total_cost"]
    assert data["cancellation_reason"] == "User cancelled"

    rebook = await book(hotel.id, guest_headers, make_stay(nights=2))
    assert rebook.status_code == 201


@pytest.mark.asyncio
async def test_cancel_with_reason(client: AsyncClient, book, guest_headers, hotel, make_stay):
    booking = (await book(hotel.id, guest_headers, make_stay())).json()
    response = await client.post(
        f"/api/v1/my-bookings/{booking['id']}/cancel",
        json={"reason": "Flight cancelled"},
        headers=guest_headers,
    )
    assert response.json()["cancellation_reason"] == "Flight cancelled"


@pytest.mark.asyncio
async def test_cancel_twice(client: AsyncClient, book, guest_headers, hotel, make_stay):
    booking = (await book(hotel.id, guest_headers, make_stay())).json()
    first = await client.post(f"/api/v1/my-bookings/{booking['id']}/cancel", headers=guest_headers)
    second = await client.post(f"/api/v1/my-bookings/{booking['id']}/cancel", headers=guest_headers)
    assert first.status_code == 200
    assert second.status_code == 404
    assert second.json()["code"] == "NOT_FOUND_OR_ILLEGAL_STATE"


@pytest.mark.asyncio
async def test_cancel_someone_elses_booking(
    client: AsyncClient, book, guest_headers, other_guest_headers, hotel, make_stay
):
    booking = (await book(hotel.id, guest_headers, make_stay())).json()
    response = await client.post(f"/api/v1/my-bookings/{booking['id']}/cancel", headers=other_guest_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_my_bookings_newest_first(client: AsyncClient, book, guest_headers, other_guest_headers, hotel, make_stay):
    first = (await book(hotel.id, guest_headers, make_stay(start_day=10))).json()
    second = (await book(hotel.id, guest_headers, make_stay(start_day=0))).json()
    await book(hotel.id, other_guest_headers, make_stay(start_day=20))

    response = await client.get("/api/v1/my-bookings/", headers=guest_headers)
    assert response.status_code == 200
    assert [b["id"] for b in response.json()] == [second["id"], first["id"]]


@pytest.mark.asyncio
async def test_availability_lists_active_ranges(client: AsyncClient, book, guest_headers, hotel, make_stay):
    later = (await book(hotel.id, guest_headers, make_stay(start_day=5))).json()
    earlier = (await book(hotel.id, guest_headers, make_stay(start_day=1))).json()
    cancelled = (await book(hotel.id, guest_headers, make_stay(start_day=9))).json()
    await client.post(f"/api/v1/my-bookings/{cancelled['id']}/cancel", headers=guest_headers)

    response = await client.get(f"/api/v1/hotels/{hotel.id}/availability")
    assert response.status_code == 200
    ranges = response.json()
    assert len(ranges) == 2
    assert ranges[0]["check_in"] == earlier["check_in"]
    assert ranges[1]["check_in"] == later["check_in"]


@pytest.mark.asyncio
async def test_counters_record_gross_volume(client: AsyncClient, db_session, book, guest, guest_headers, hotel, make_stay):
    """Counters grow with each booking and are not reversed by cancellation."""
    first = (await book(hotel.id, guest_headers, make_stay(start_day=0))).json()
    await book(hotel.id, guest_headers, make_stay(start_day=3, nights=2))
    await client.post(f"/api/v1/my-bookings/{first['id']}/cancel", headers=guest_headers)

    hotel_row = (await db_session.execute(
        select(Hotel.total_bookings, Hotel.total_revenue, Hotel.version).where(Hotel.id == hotel.id)
    )).one()
    assert hotel_row.total_bookings == 2
    assert hotel_row.total_revenue == 15000
    assert hotel_row.version == 3

    user_row = (await db_session.execute(
        select(User.total_bookings, User.total_spent).where(User.id == guest.id)
    )).one()
    assert user_row.total_bookings == 2
    assert user_row.total_spent == 15000


@pytest.mark.asyncio
async def test_analytics_cache_cleared_after_commit(
    client: AsyncClient, monkeypatch, session_factory, book, guest_headers, hotel, make_stay
):
    """Invalidation runs once the write is visible to other sessions."""
    seen = []

    async def record_active_bookings():
        async with session_factory() as session:
            seen.append(await session.scalar(
                select(func.count(Booking.id)).where(Booking.status != "CANCELLED")
            ))

    monkeypatch.setattr(hotel_routes, "invalidate_analytics_cache", record_active_bookings)
    monkeypatch.setattr(my_booking_routes, "invalidate_analytics_cache", record_active_bookings)

    booking = (await book(hotel.id, guest_headers, make_stay())).json()
    assert seen == [1]

    response = await client.post(f"/api/v1/my-bookings/{booking['id']}/cancel", headers=guest_headers)
    assert response.status_code == 200
    assert seen == [1, 0]
