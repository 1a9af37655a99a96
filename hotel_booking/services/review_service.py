"""
Guest reviews of completed stays.

The hotel's average_rating and review_count are both derived from the same
aggregate over the reviews table, computed after the new review is
flushed, so the mean and the count always describe the same review set.
"""

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.core.exceptions import BookingValidationError, NotFoundOrIllegalStateError
from hotel_booking.core.logging import get_logger
from hotel_booking.models.booking import Booking, BookingStatus
from hotel_booking.models.hotel import Hotel
from hotel_booking.models.review import Review
from hotel_booking.schemas.review import ReviewCreate

logger = get_logger(__name__)


async def submit_review(db: AsyncSession, user_id: int, data: ReviewCreate) -> Review:
    result = await db.execute(
        select(Booking).where(
            Booking.id == data.booking_id,
            Booking.user_id == user_id,
            Booking.hotel_id == data.hotel_id,
            Booking.status == BookingStatus.COMPLETED.value,
        )
    )
    if result.scalar_one_or_none() is None:
        raise NotFoundOrIllegalStateError("Completed booking not found or doesn't belong to you")

    existing = await db.execute(select(Review.id).where(Review.booking_id == data.booking_id))
    if existing.scalar_one_or_none() is not None:
        raise BookingValidationError("You have already reviewed this stay")

    review = Review(
        user_id=user_id,
        hotel_id=data.hotel_id,
        booking_id=data.booking_id,
        rating=data.rating,
        comment=data.comment,
        **data.categories.model_dump(),
    )
    db.add(review)
    try:
        await db.flush()
    except IntegrityError:
        # Lost a race with a concurrent review of the same booking
        await db.rollback()
        raise BookingValidationError("You have already reviewed this stay")

    await db.execute(
        update(Hotel)
        .where(Hotel.id == data.hotel_id)
        .values(
            average_rating=select(func.avg(Review.rating))
            .where(Review.hotel_id == Hotel.id)
            .scalar_subquery(),
            review_count=select(func.count(Review.id))
            .where(Review.hotel_id == Hotel.id)
            .scalar_subquery(),
        )
        .execution_options(synchronize_session=False)
    )
    await db.refresh(review)

    logger.info("review_submitted", review_id=review.id, hotel_id=data.hotel_id, rating=data.rating)
    return review


async def list_hotel_reviews(db: AsyncSession, hotel_id: int) -> list[Review]:
    result = await db.execute(
        select(Review)
        .where(Review.hotel_id == hotel_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    return list(result.scalars().all())
