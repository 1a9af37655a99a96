"""
Pydantic schemas for guest reviews.
"""

from pydantic import BaseModel, Field

from hotel_booking.schemas.types import UtcDatetime


class ReviewCategories(BaseModel):
    cleanliness: int = Field(..., ge=1, le=5)
    service: int = Field(..., ge=1, le=5)
    location: int = Field(..., ge=1, le=5)
    value: int = Field(..., ge=1, le=5)
    amenities: int = Field(..., ge=1, le=5)


class ReviewCreate(BaseModel):
    hotel_id: int
    booking_id: int
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=5000)
    categories: ReviewCategories


class ReviewResponse(BaseModel):
    id: int
    user_id: int
    hotel_id: int
    booking_id: int
    rating: int
    comment: str
    categories: ReviewCategories
    created_at: UtcDatetime

    model_config = {"from_attributes": True}
