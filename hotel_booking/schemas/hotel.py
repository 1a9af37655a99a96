from pydantic import BaseModel


class HotelCountersResponse(BaseModel):
    id: int
    total_bookings: int
    total_revenue: float
    average_rating: float
    review_count: int

    model_config = {"from_attributes": True}
