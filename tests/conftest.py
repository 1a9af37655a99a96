"""
Pytest fixtures for test database, client, and authentication.

Each test gets its own SQLite file database, so separate sessions (one per
HTTP request, several per concurrency test) contend for real write locks.
"""

import os

# Must be set before the application reads its settings
os.environ["REDIS_ENABLED"] = "false"
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./hotel_booking_dev.db")

from datetime import datetime, timezone, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from hotel_booking.main import app
from hotel_booking.db.base import Base
from hotel_booking.db.session import get_db
from hotel_booking.core.security import create_access_token
from hotel_booking.models.hotel import Hotel
from hotel_booking.models.user import User, UserRole

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """Create tables in a throwaway database file."""
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        connect_args={"timeout": 30},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose requests each get a fresh session, like production."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _persist(db_session: AsyncSession, obj):
    db_session.add(obj)
    await db_session.commit()
    await db_session.refresh(obj)
    return obj


def headers_for(user: User) -> dict:
    """Authorization headers with a Bearer token for `user`."""
    return {"Authorization": f"Bearer {create_access_token(data={'sub': str(user.id)})}"}


@pytest_asyncio.fixture
async def guest(db_session: AsyncSession) -> User:
    return await _persist(db_session, User(
        email="asha@example.com",
        first_name="Asha",
        last_name="Rao",
        phone="+91 98765 43210",
        role=UserRole.USER.value,
    ))


@pytest_asyncio.fixture
async def other_guest(db_session: AsyncSession) -> User:
    return await _persist(db_session, User(
        email="ravi@example.com",
        first_name="Ravi",
        last_name="Menon",
        role=UserRole.USER.value,
    ))


@pytest_asyncio.fixture
async def owner(db_session: AsyncSession) -> User:
    return await _persist(db_session, User(
        email="owner@example.com",
        first_name="Meera",
        last_name="Shah",
        role=UserRole.HOTEL_OWNER.value,
    ))


@pytest_asyncio.fixture
async def other_owner(db_session: AsyncSession) -> User:
    return await _persist(db_session, User(
        email="rival@example.com",
        first_name="Karan",
        last_name="Das",
        role=UserRole.HOTEL_OWNER.value,
    ))


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession) -> User:
    return await _persist(db_session, User(
        email="admin@example.com",
        first_name="Ops",
        last_name="Admin",
        role=UserRole.ADMIN.value,
    ))


@pytest_asyncio.fixture
async def hotel(db_session: AsyncSession, owner: User) -> Hotel:
    """ID proof required, nightly and hourly stays."""
    return await _persist(db_session, Hotel(
        owner_id=owner.id,
        name="Lakeview Inn",
        city="Udaipur",
        country="India",
        price_per_night=5000,
        price_per_hour=500,
        adult_count=4,
        child_count=2,
        requires_id_proof=True,
    ))


@pytest_asyncio.fixture
async def express_hotel(db_session: AsyncSession, owner: User) -> Hotel:
    """No ID proof, nightly stays only."""
    return await _persist(db_session, Hotel(
        owner_id=owner.id,
        name="Beach Shack",
        city="Goa",
        country="India",
        price_per_night=2000,
        price_per_hour=None,
        adult_count=2,
        child_count=0,
        requires_id_proof=False,
    ))


@pytest.fixture
def guest_headers(guest: User) -> dict:
    return headers_for(guest)


@pytest.fixture
def other_guest_headers(other_guest: User) -> dict:
    return headers_for(other_guest)


@pytest.fixture
def owner_headers(owner: User) -> dict:
    return headers_for(owner)


@pytest.fixture
def other_owner_headers(other_owner: User) -> dict:
    return headers_for(other_owner)


@pytest.fixture
def admin_headers(admin: User) -> dict:
    return headers_for(admin)


@pytest.fixture
def make_stay():
    """
    Build a booking payload relative to a fixed check-in 30 days out at 14:00 UTC.
    `hours` switches to an hourly stay of that length.
    """
    base = (datetime.now(timezone.utc) + timedelta(days=30)).replace(
        hour=14, minute=0, second=0, microsecond=0
    )

    def _make(start_day: int = 0, nights: int = 1, hours=None, **extra) -> dict:
        check_in = base + timedelta(days=start_day)
        if hours is None:
            check_out = check_in + timedelta(days=nights)
            booking_type = "nightly"
        else:
            check_out = check_in + timedelta(hours=hours)
            booking_type = "hourly"
        payload = {
            "check_in": check_in.isoformat(),
            "check_out": check_out.isoformat(),
            "adult_count": 2,
            "child_count": 0,
            "booking_type": booking_type,
        }
        payload.update(extra)
        return payload

    return _make


@pytest_asyncio.fixture
async def book(client: AsyncClient):
    """POST a booking and return the response."""

    async def _book(hotel_id: int, headers: dict, payload: dict):
        return await client.post(f"/api/v1/hotels/{hotel_id}/bookings", json=payload, headers=headers)

    return _book


@pytest_asyncio.fixture
async def upload_id(client: AsyncClient):
    async def _upload(booking_id: int, headers: dict, id_type: str = "Passport", back: bool = False):
        files = {"front_image": ("front.png", PNG_BYTES, "image/png")}
        if back:
            files["back_image"] = ("back.png", PNG_BYTES, "image/png")
        return await client.post(
            f"/api/v1/my-bookings/{booking_id}/upload-id",
            data={"id_type": id_type},
            files=files,
            headers=headers,
        )

    return _upload
