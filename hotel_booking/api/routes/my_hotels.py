"""
Owner endpoints over the owner's hotels.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.core.security import CurrentUser, require_roles
from hotel_booking.db.session import get_db
from hotel_booking.models.user import UserRole
from hotel_booking.schemas.guest import GuestResponse
from hotel_booking.schemas.hotel import HotelCountersResponse
from hotel_booking.services.booking_service import list_hotel_guests, reconcile_hotel_counters

router = APIRouter(prefix="/my-hotels", tags=["My Hotels"])
staff = require_roles(UserRole.HOTEL_OWNER, UserRole.ADMIN)


@router.get("/guests", response_model=list[GuestResponse])
async def list_guests(
    actor: CurrentUser = Depends(staff),
    db: AsyncSession = Depends(get_db),
):
    """Everyone who booked one of the caller's hotels, with stay history."""
    return await list_hotel_guests(db, actor.id)


@router.post("/{hotel_id}/reconcile", response_model=HotelCountersResponse)
async def reconcile_counters(
    hotel_id: int,
    actor: CurrentUser = Depends(staff),
    db: AsyncSession = Depends(get_db),
):
    """Rebuild the hotel's and its guests' booking counters from the bookings table."""
    return await reconcile_hotel_counters(db, hotel_id, actor)
