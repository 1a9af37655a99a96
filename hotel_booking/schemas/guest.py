"""
Schemas for the owner's guest list.
"""

from typing import Optional

from pydantic import BaseModel

from hotel_booking.schemas.booking import IdProofResponse
from hotel_booking.schemas.types import UtcDatetime


class StayResponse(BaseModel):
    booking_id: int
    hotel_name: str
    check_in: UtcDatetime
    check_out: UtcDatetime
    total_cost: float
    status: str
    payment_status: str
    id_proof: IdProofResponse
    phone: Optional[str]


class GuestResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    total_stays: int
    total_spent: float
    stay_history: list[StayResponse]
