"""
Pydantic schemas for booking-related request/response validation.
"""

import enum
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from hotel_booking.models.booking import BookingType
from hotel_booking.schemas.types import UtcDatetime


class BookingCreate(BaseModel):
    check_in: datetime
    check_out: datetime
    adult_count: int = Field(..., ge=1, le=50)
    child_count: int = Field(default=0, ge=0, le=50)
    booking_type: BookingType = BookingType.NIGHTLY

    # Contact snapshot; defaults to the guest's profile when omitted
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)

    special_requests: Optional[str] = Field(None, max_length=2000)
    payment_method: Optional[str] = Field(None, max_length=50)


class BookingCancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class IdReviewDecision(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"


class IdReviewRequest(BaseModel):
    action: IdReviewDecision
    rejection_reason: Optional[str] = Field(None, max_length=500)


class IdProofResponse(BaseModel):
    id_type: Optional[str]
    front_image: Optional[str]
    back_image: Optional[str]
    status: str
    uploaded_at: Optional[UtcDatetime]
    verified_at: Optional[UtcDatetime]
    rejection_reason: Optional[str]


class HotelSummary(BaseModel):
    id: int
    name: str
    city: str
    country: str

    model_config = {"from_attributes": True}


class BookingResponse(BaseModel):
    id: int
    user_id: int
    hotel_id: int
    first_name: str
    last_name: str
    email: str
    phone: Optional[str]
    adult_count: int
    child_count: int
    check_in: UtcDatetime
    check_out: UtcDatetime
    booking_type: str
    total_cost: float
    status: str
    payment_status: str
    payment_method: Optional[str]
    refund_amount: float
    special_requests: Optional[str]
    cancellation_reason: Optional[str]
    rejection_reason: Optional[str]
    id_proof: IdProofResponse
    hotel: Optional[HotelSummary] = None
    created_at: UtcDatetime
    updated_at: UtcDatetime

    model_config = {"from_attributes": True}


class BookedRangeResponse(BaseModel):
    check_in: UtcDatetime
    check_out: UtcDatetime
    booking_type: str

    model_config = {"from_attributes": True}


class AvailabilityCheckResponse(BaseModel):
    check_in: UtcDatetime
    check_out: UtcDatetime
    booking_type: BookingType
    available: bool
