"""
Staff booking endpoints: ID-proof review and stay completion.
Restricted to the hotel's owner or an admin.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.core.security import CurrentUser, require_roles
from hotel_booking.db.session import get_db
from hotel_booking.models.user import UserRole
from hotel_booking.schemas.booking import BookingResponse, IdReviewRequest
from hotel_booking.services.booking_service import complete_booking
from hotel_booking.services.cache_service import invalidate_analytics_cache
from hotel_booking.services.id_proof_service import review_id_proof
from hotel_booking.services.interfaces.payment import PaymentProcessor
from hotel_booking.services.strategy_factory import get_payment_processor

router = APIRouter(prefix="/bookings", tags=["Bookings"])
staff = require_roles(UserRole.HOTEL_OWNER, UserRole.ADMIN)


@router.patch("/{booking_id}/verify-id", response_model=BookingResponse)
async def verify_id_endpoint(
    booking_id: int,
    review: IdReviewRequest,
    actor: CurrentUser = Depends(staff),
    db: AsyncSession = Depends(get_db),
    payment: PaymentProcessor = Depends(get_payment_processor),
):
    """
    Approve (booking CONFIRMED) or reject (booking REJECTED, full refund)
    a submitted ID proof.
    """
    booking = await review_id_proof(db, booking_id, actor, review.action, payment, review.rejection_reason)
    await db.commit()
    await invalidate_analytics_cache()
    return booking


@router.post("/{booking_id}/complete", response_model=BookingResponse)
async def complete_endpoint(
    booking_id: int,
    actor: CurrentUser = Depends(staff),
    db: AsyncSession = Depends(get_db),
):
    """Mark a stay as completed once its check-out time has passed."""
    booking = await complete_booking(db, booking_id, actor)
    await db.commit()
    await invalidate_analytics_cache()
    return booking
