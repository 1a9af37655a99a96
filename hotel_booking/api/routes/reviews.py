"""
Review endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.core.security import get_current_user_id
from hotel_booking.db.session import get_db
from hotel_booking.schemas.review import ReviewCreate, ReviewResponse
from hotel_booking.services.review_service import list_hotel_reviews, submit_review

router = APIRouter(prefix="/reviews", tags=["Reviews"])


@router.post("/", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    review_data: ReviewCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Review a completed stay; one review per booking."""
    return await submit_review(db, user_id, review_data)


@router.get("/hotel/{hotel_id}", response_model=list[ReviewResponse])
async def hotel_reviews(hotel_id: int, db: AsyncSession = Depends(get_db)):
    return await list_hotel_reviews(db, hotel_id)
