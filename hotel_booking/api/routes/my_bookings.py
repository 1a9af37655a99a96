"""
Guest-facing booking endpoints: history, ID upload, cancellation.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.core.config import get_settings
from hotel_booking.core.exceptions import BookingValidationError
from hotel_booking.core.security import get_current_user_id
from hotel_booking.db.session import get_db
from hotel_booking.models.booking import IdType
from hotel_booking.schemas.booking import BookingCancelRequest, BookingResponse
from hotel_booking.services.booking_service import cancel_booking, get_user_bookings
from hotel_booking.services.cache_service import invalidate_analytics_cache
from hotel_booking.services.id_proof_service import submit_id_proof
from hotel_booking.services.interfaces.payment import PaymentProcessor
from hotel_booking.services.interfaces.storage import ImageStorage
from hotel_booking.services.strategy_factory import get_image_storage, get_payment_processor

settings = get_settings()
router = APIRouter(prefix="/my-bookings", tags=["My Bookings"])


async def _store_image(storage: ImageStorage, upload: UploadFile) -> str:
    content = await upload.read()
    if not content:
        raise BookingValidationError("Uploaded ID image is empty")
    if len(content) > settings.ID_PROOF_MAX_BYTES:
        raise BookingValidationError(
            f"ID images must be at most {settings.ID_PROOF_MAX_BYTES // (1024 * 1024)} MB"
        )
    content_type = upload.content_type or "application/octet-stream"
    if not content_type.startswith("image/"):
        raise BookingValidationError("ID proof must be an image")
    return await storage.store(content, content_type)


@router.get("/", response_model=list[BookingResponse])
async def list_my_bookings(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Bookings of the authenticated guest, newest first."""
    return await get_user_bookings(db, user_id)


@router.post("/{booking_id}/upload-id", response_model=BookingResponse)
async def upload_id_proof(
    booking_id: int,
    id_type: IdType = Form(...),
    front_image: Optional[UploadFile] = File(None),
    back_image: Optional[UploadFile] = File(None),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
):
    """Submit identity documents; the booking moves to ID_SUBMITTED."""
    if front_image is None:
        raise BookingValidationError("Front image is required")
    front_ref = await _store_image(storage, front_image)
    back_ref = await _store_image(storage, back_image) if back_image is not None else None

    booking = await submit_id_proof(db, booking_id, user_id, id_type, front_ref, back_ref)
    await db.commit()
    await invalidate_analytics_cache()
    return booking


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_my_booking(
    booking_id: int,
    cancel_data: Optional[BookingCancelRequest] = None,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    payment: PaymentProcessor = Depends(get_payment_processor),
):
    """Cancel a booking that has not reached a terminal status; fully refunded."""
    reason = cancel_data.reason if cancel_data else None
    booking = await cancel_booking(db, booking_id, user_id, payment, reason)
    await db.commit()
    await invalidate_analytics_cache()
    return booking
