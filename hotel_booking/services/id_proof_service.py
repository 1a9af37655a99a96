"""
Identity-proof subflow of a booking.

Upload moves the proof PENDING -> SUBMITTED and the booking
ID_PENDING -> ID_SUBMITTED. Review by the hotel owner or an admin moves it
to VERIFIED (booking CONFIRMED) or REJECTED (booking REJECTED with a full
refund). Each transition is one conditional UPDATE on the booking row.
"""

from typing import Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.core.clock import utcnow
from hotel_booking.core.exceptions import BookingValidationError, NotFoundOrIllegalStateError
from hotel_booking.core.logging import get_logger
from hotel_booking.core.metrics import record_transition
from hotel_booking.core.security import CurrentUser
from hotel_booking.models.booking import Booking, BookingStatus, IdProofStatus, IdType, PaymentStatus
from hotel_booking.schemas.booking import IdReviewDecision
from hotel_booking.services.booking_service import ensure_hotel_staff, load_booking, refund_booking
from hotel_booking.services.interfaces.payment import PaymentProcessor
from hotel_booking.services.lifecycle import id_proof_sources_for, sources_for

logger = get_logger(__name__)

DEFAULT_REJECTION_REASON = "ID proof could not be verified"


async def submit_id_proof(
    db: AsyncSession,
    booking_id: int,
    user_id: int,
    id_type: IdType,
    front_image: Optional[str],
    back_image: Optional[str] = None,
) -> Booking:
    if not front_image:
        raise BookingValidationError("Front image is required")

    result = await db.execute(
        update(Booking)
        .where(
            Booking.id == booking_id,
            Booking.user_id == user_id,
            Booking.status.in_(sources_for(BookingStatus.ID_SUBMITTED)),
            Booking.id_proof_status.in_(id_proof_sources_for(IdProofStatus.SUBMITTED)),
        )
        .values(
            status=BookingStatus.ID_SUBMITTED.value,
            id_proof_type=IdType(id_type).value,
            id_proof_front_image=front_image,
            id_proof_back_image=back_image or None,
            id_proof_status=IdProofStatus.SUBMITTED.value,
            id_proof_uploaded_at=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFoundOrIllegalStateError("Booking not found or not awaiting ID proof")

    logger.info("id_proof_submitted", booking_id=booking_id, user_id=user_id, id_type=IdType(id_type).value)
    record_transition(BookingStatus.ID_SUBMITTED.value)
    return await load_booking(db, booking_id)


async def review_id_proof(
    db: AsyncSession,
    booking_id: int,
    actor: CurrentUser,
    decision: IdReviewDecision,
    payment: PaymentProcessor,
    reason: Optional[str] = None,
) -> Booking:
    booking = await load_booking(db, booking_id)
    if booking is None:
        raise NotFoundOrIllegalStateError("Booking not found")
    ensure_hotel_staff(actor, booking.hotel)

    if decision == IdReviewDecision.APPROVE:
        target = BookingStatus.CONFIRMED
        values = {
            "status": target.value,
            "id_proof_status": IdProofStatus.VERIFIED.value,
            "id_proof_verified_at": utcnow(),
        }
        proof_target = IdProofStatus.VERIFIED
    else:
        target = BookingStatus.REJECTED
        reason = reason or DEFAULT_REJECTION_REASON
        values = {
            "status": target.value,
            "id_proof_status": IdProofStatus.REJECTED.value,
            "id_proof_rejection_reason": reason,
            "rejection_reason": reason,
            "payment_status": PaymentStatus.REFUNDED.value,
            "refund_amount": Booking.total_cost,
        }
        proof_target = IdProofStatus.REJECTED

    result = await db.execute(
        update(Booking)
        .where(
            Booking.id == booking_id,
            Booking.status.in_(sources_for(target)),
            Booking.id_proof_status.in_(id_proof_sources_for(proof_target)),
        )
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFoundOrIllegalStateError(f"Booking in status {booking.status} has no ID proof awaiting review")

    booking = await load_booking(db, booking_id)
    if target == BookingStatus.REJECTED:
        await refund_booking(payment, booking)

    logger.info(
        "id_proof_reviewed",
        booking_id=booking_id,
        actor_id=actor.id,
        actor_role=actor.role.value,
        decision=decision.value,
        status=booking.status,
    )
    record_transition(target.value)
    return booking
