"""
Booking service with double-booking-safe reservation.

CONCURRENCY STRATEGY: Optimistic Locking on the Hotel Row
==========================================================

Problem:
  Two guests request overlapping dates for the same hotel at the same time.
  Both run the overlap query, both see no conflict, both insert.
  Result: Double booking.

Solution:
  Every booking creation bumps `hotels.version` in the same transaction as
  the insert.

  1. Read the hotel's current version
  2. Run the overlap query for [check_in, check_out)
  3. UPDATE hotels SET version = version + 1,
                       total_bookings = total_bookings + 1,
                       total_revenue = total_revenue + :cost
     WHERE id = :hotel_id AND version = :current_version
  4. If rows_affected == 0, another booking for this hotel committed in
     between -> roll back and start over from step 1, so the overlap query
     sees the other writer's row
  5. Insert the booking and increment the guest's counters

  The UPDATE row lock is held until commit, so a second writer that read
  the same version always loses at step 3 and re-validates. Counters are
  incremented in SQL, never read-modify-written from a stale snapshot.

  Bookings for different hotels never contend.
"""

from collections import OrderedDict
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.core.clock import as_utc, utcnow
from hotel_booking.core.config import get_settings
from hotel_booking.core.exceptions import (
    BookingValidationError,
    DatesUnavailableError,
    DependencyFailureError,
    NotFoundOrIllegalStateError,
    PermissionDeniedError,
)
from hotel_booking.core.logging import get_logger
from hotel_booking.core.metrics import record_booking_attempt, record_retry, record_transition
from hotel_booking.core.security import CurrentUser
from hotel_booking.models.booking import Booking, BookingStatus, BookingType, PaymentStatus
from hotel_booking.models.hotel import Hotel
from hotel_booking.models.user import User
from hotel_booking.schemas.booking import BookingCreate
from hotel_booking.services.availability import conflict_query, validate_interval
from hotel_booking.services.interfaces.payment import PaymentProcessor
from hotel_booking.services.lifecycle import sources_for
from hotel_booking.services.pricing import total_cost

logger = get_logger(__name__)
settings = get_settings()

DEFAULT_CANCELLATION_REASON = "User cancelled"


async def load_booking(db: AsyncSession, booking_id: int) -> Optional[Booking]:
    """Fresh read of a booking, bypassing any stale identity-map copy."""
    result = await db.execute(
        select(Booking)
        .where(Booking.id == booking_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _load_hotel(db: AsyncSession, hotel_id: int) -> Optional[Hotel]:
    result = await db.execute(
        select(Hotel).where(Hotel.id == hotel_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


def _check_occupancy(hotel: Hotel, adult_count: int, child_count: int) -> None:
    if adult_count < 1:
        raise BookingValidationError("At least one adult is required")
    if child_count < 0:
        raise BookingValidationError("Child count cannot be negative")
    if adult_count > hotel.adult_count or child_count > hotel.child_count:
        raise BookingValidationError(
            f"Occupancy exceeds hotel capacity ({hotel.adult_count} adults, {hotel.child_count} children)"
        )


async def create_booking(
    db: AsyncSession,
    user_id: int,
    hotel_id: int,
    data: BookingCreate,
    payment: PaymentProcessor,
) -> Booking:
    """
    Reserve [check_in, check_out) at a hotel for a guest.
    Retries up to BOOKING_MAX_RETRY_ATTEMPTS on hotel version conflicts.
    """
    booking_type = BookingType(data.booking_type)
    check_in, check_out = as_utc(data.check_in), as_utc(data.check_out)
    try:
        validate_interval(check_in, check_out, booking_type)
    except BookingValidationError:
        record_booking_attempt("invalid")
        raise

    guest = await db.get(User, user_id)
    if guest is None:
        raise NotFoundOrIllegalStateError(f"User {user_id} not found")
    # Plain values: a retry rollback expires ORM instances
    snapshot = {
        "first_name": data.first_name or guest.first_name,
        "last_name": data.last_name or guest.last_name,
        "email": data.email or guest.email,
        "phone": data.phone or guest.phone,
    }

    max_attempts = settings.BOOKING_MAX_RETRY_ATTEMPTS
    for attempt in range(1, max_attempts + 1):
        # Step 1: Read current hotel state
        hotel = await _load_hotel(db, hotel_id)
        if hotel is None:
            raise NotFoundOrIllegalStateError(f"Hotel {hotel_id} not found")

        try:
            _check_occupancy(hotel, data.adult_count, data.child_count)
            cost = total_cost(hotel, check_in, check_out, booking_type)
        except BookingValidationError:
            record_booking_attempt("invalid")
            raise

        # Step 2: Overlap check against active bookings
        conflict = (await db.execute(conflict_query(hotel_id, check_in, check_out))).scalar_one_or_none()
        if conflict is not None:
            logger.warning(
                "booking_conflict",
                hotel_id=hotel_id,
                conflicting_booking_id=conflict,
                check_in=check_in.isoformat(),
                check_out=check_out.isoformat(),
            )
            record_booking_attempt("conflict")
            raise DatesUnavailableError(
                "These dates are no longer available. Please select different dates."
            )

        # Step 3: Optimistic lock - claim the hotel only if nobody booked it meanwhile
        current_version = hotel.version
        update_result = await db.execute(
            update(Hotel)
            .where(Hotel.id == hotel_id, Hotel.version == current_version)
            .values(
                version=Hotel.version + 1,
                total_bookings=Hotel.total_bookings + 1,
                total_revenue=Hotel.total_revenue + cost,
            )
            .execution_options(synchronize_session=False)
        )

        if update_result.rowcount == 0:
            logger.info(
                "booking_retry",
                hotel_id=hotel_id,
                attempt=attempt,
                reason="version_conflict",
            )
            record_retry()
            await db.rollback()
            continue

        # Step 4: Payment (simulated by default), then the booking row
        charge = await payment.charge(cost, reference=f"hotel-{hotel_id}-user-{user_id}")
        if not charge.succeeded:
            await db.rollback()
            record_booking_attempt("error")
            logger.error("booking_payment_failed", hotel_id=hotel_id, user_id=user_id, message=charge.message)
            raise DependencyFailureError("Payment could not be processed. Please try again.")

        initial_status = BookingStatus.ID_PENDING if hotel.requires_id_proof else BookingStatus.PAYMENT_DONE
        booking = Booking(
            user_id=user_id,
            hotel_id=hotel_id,
            **snapshot,
            adult_count=data.adult_count,
            child_count=data.child_count,
            check_in=check_in,
            check_out=check_out,
            booking_type=booking_type.value,
            total_cost=cost,
            status=initial_status.value,
            payment_status=PaymentStatus.PAID.value,
            payment_method=data.payment_method,
            payment_reference=charge.reference,
            special_requests=data.special_requests,
        )
        db.add(booking)

        # Step 5: Guest counters, same transaction
        await db.execute(
            update(User)
            .where(User.id == user_id)
            .values(total_bookings=User.total_bookings + 1, total_spent=User.total_spent + cost)
            .execution_options(synchronize_session=False)
        )
        await db.flush()

        logger.info(
            "booking_created",
            booking_id=booking.id,
            user_id=user_id,
            hotel_id=hotel_id,
            booking_type=booking_type.value,
            total_cost=cost,
            status=initial_status.value,
            attempt=attempt,
        )
        record_booking_attempt("success")
        record_transition(initial_status.value)
        return await load_booking(db, booking.id)

    logger.warning("booking_retries_exhausted", hotel_id=hotel_id, attempts=max_attempts)
    record_booking_attempt("conflict")
    raise DatesUnavailableError(
        "Booking failed due to high demand for this hotel. Please try again.",
        retryable=True,
    )


async def refund_booking(payment: PaymentProcessor, booking: Booking) -> None:
    """Full refund through the payment processor; failure aborts the transition."""
    result = await payment.refund(booking.total_cost, reference=booking.payment_reference or str(booking.id))
    if not result.succeeded:
        logger.error("booking_refund_failed", booking_id=booking.id, message=result.message)
        raise DependencyFailureError("Refund could not be processed. Please try again.")


async def cancel_booking(
    db: AsyncSession,
    booking_id: int,
    user_id: int,
    payment: PaymentProcessor,
    reason: Optional[str] = None,
) -> Booking:
    """
    Guest cancellation with a full refund.
    A single conditional UPDATE guards ownership and status.
    """
    result = await db.execute(
        update(Booking)
        .where(
            Booking.id == booking_id,
            Booking.user_id == user_id,
            Booking.status.in_(sources_for(BookingStatus.CANCELLED)),
        )
        .values(
            status=BookingStatus.CANCELLED.value,
            payment_status=PaymentStatus.REFUNDED.value,
            refund_amount=Booking.total_cost,
            cancellation_reason=reason or DEFAULT_CANCELLATION_REASON,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFoundOrIllegalStateError(
            "Booking not found or cannot be cancelled (it may already be completed or cancelled)"
        )

    booking = await load_booking(db, booking_id)
    await refund_booking(payment, booking)

    logger.info(
        "booking_cancelled",
        booking_id=booking_id,
        user_id=user_id,
        hotel_id=booking.hotel_id,
        refund_amount=booking.refund_amount,
    )
    record_transition(BookingStatus.CANCELLED.value)
    return booking


def ensure_hotel_staff(actor: CurrentUser, hotel: Hotel) -> None:
    """Admins act on any hotel, owners only on their own."""
    if actor.is_admin:
        return
    if hotel.owner_id != actor.id:
        raise PermissionDeniedError("Only the hotel owner or an admin can manage this booking")


async def complete_booking(
    db: AsyncSession,
    booking_id: int,
    actor: CurrentUser,
    now: Optional[datetime] = None,
) -> Booking:
    """Mark a stay as concluded once its check-out has passed."""
    now = now or utcnow()
    booking = await load_booking(db, booking_id)
    if booking is None:
        raise NotFoundOrIllegalStateError("Booking not found")
    ensure_hotel_staff(actor, booking.hotel)

    if as_utc(booking.check_out) > now:
        raise NotFoundOrIllegalStateError("Booking cannot be completed before its check-out time")

    result = await db.execute(
        update(Booking)
        .where(
            Booking.id == booking_id,
            Booking.status.in_(sources_for(BookingStatus.COMPLETED)),
        )
        .values(status=BookingStatus.COMPLETED.value)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFoundOrIllegalStateError(f"Booking in status {booking.status} cannot be completed")

    logger.info("booking_completed", booking_id=booking_id, actor_id=actor.id)
    record_transition(BookingStatus.COMPLETED.value)
    return await load_booking(db, booking_id)


async def complete_past_bookings(db: AsyncSession, now: Optional[datetime] = None) -> int:
    """Bulk CONFIRMED/PAYMENT_DONE -> COMPLETED for stays whose check-out has passed."""
    now = now or utcnow()
    result = await db.execute(
        update(Booking)
        .where(
            Booking.status.in_(sources_for(BookingStatus.COMPLETED)),
            Booking.check_out <= now,
        )
        .values(status=BookingStatus.COMPLETED.value)
        .execution_options(synchronize_session=False)
    )
    completed = result.rowcount or 0
    if completed:
        logger.info("bookings_auto_completed", count=completed)
        record_transition(BookingStatus.COMPLETED.value, completed)
    return completed


async def get_user_bookings(db: AsyncSession, user_id: int) -> list[Booking]:
    """Get all bookings for a guest, newest first."""
    result = await db.execute(
        select(Booking)
        .where(Booking.user_id == user_id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
    )
    return list(result.scalars().all())


async def get_owner_bookings(db: AsyncSession, owner_id: int) -> list[Booking]:
    """All bookings for hotels owned by `owner_id`."""
    result = await db.execute(
        select(Booking)
        .join(Hotel, Hotel.id == Booking.hotel_id)
        .where(Hotel.owner_id == owner_id)
        .order_by(Booking.created_at.asc(), Booking.id.asc())
    )
    return list(result.scalars().all())


async def list_hotel_guests(db: AsyncSession, owner_id: int) -> list[dict]:
    """
    Guests who booked any of the owner's hotels, each with their stay history.
    Name and email come from the user record, falling back to the booking snapshot.
    """
    bookings = await get_owner_bookings(db, owner_id)
    user_ids = {b.user_id for b in bookings}
    users = {}
    if user_ids:
        result = await db.execute(select(User).where(User.id.in_(user_ids)))
        users = {u.id: u for u in result.scalars().all()}

    guests: "OrderedDict[int, dict]" = OrderedDict()
    for booking in bookings:
        user = users.get(booking.user_id)
        guest = guests.get(booking.user_id)
        if guest is None:
            guest = {
                "id": booking.user_id,
                "first_name": user.first_name if user else booking.first_name,
                "last_name": user.last_name if user else booking.last_name,
                "email": user.email if user else booking.email,
                "total_stays": 0,
                "total_spent": 0.0,
                "stay_history": [],
            }
            guests[booking.user_id] = guest

        guest["total_stays"] += 1
        guest["total_spent"] += booking.total_cost or 0
        guest["stay_history"].append({
            "booking_id": booking.id,
            "hotel_name": booking.hotel.name if booking.hotel else "Unknown Hotel",
            "check_in": as_utc(booking.check_in),
            "check_out": as_utc(booking.check_out),
            "total_cost": booking.total_cost,
            "status": booking.status,
            "payment_status": booking.payment_status,
            "id_proof": booking.id_proof,
            "phone": booking.phone or (user.phone if user else None) or "",
        })
    return list(guests.values())


async def reconcile_hotel_counters(db: AsyncSession, hotel_id: int, actor: CurrentUser) -> Hotel:
    """
    Recompute the denormalized counters of a hotel, and of every guest who
    booked it, from the bookings table.
    """
    hotel = await _load_hotel(db, hotel_id)
    if hotel is None:
        raise NotFoundOrIllegalStateError(f"Hotel {hotel_id} not found")
    ensure_hotel_staff(actor, hotel)

    await db.execute(
        update(Hotel)
        .where(Hotel.id == hotel_id)
        .values(
            total_bookings=select(func.count(Booking.id))
            .where(Booking.hotel_id == Hotel.id)
            .scalar_subquery(),
            total_revenue=select(func.coalesce(func.sum(Booking.total_cost), 0))
            .where(Booking.hotel_id == Hotel.id)
            .scalar_subquery(),
        )
        .execution_options(synchronize_session=False)
    )

    guest_ids = select(Booking.user_id).where(Booking.hotel_id == hotel_id).distinct()
    await db.execute(
        update(User)
        .where(User.id.in_(guest_ids))
        .values(
            total_bookings=select(func.count(Booking.id))
            .where(Booking.user_id == User.id)
            .scalar_subquery(),
            total_spent=select(func.coalesce(func.sum(Booking.total_cost), 0))
            .where(Booking.user_id == User.id)
            .scalar_subquery(),
        )
        .execution_options(synchronize_session=False)
    )

    hotel = await _load_hotel(db, hotel_id)
    logger.info(
        "counters_reconciled",
        hotel_id=hotel_id,
        total_bookings=hotel.total_bookings,
        total_revenue=hotel.total_revenue,
    )
    return hotel
