"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from hotel_booking.api.routes import bookings, business_insights, hotels, my_bookings, my_hotels, reviews

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(hotels.router)
api_router.include_router(my_bookings.router)
api_router.include_router(bookings.router)
api_router.include_router(my_hotels.router)
api_router.include_router(business_insights.router)
api_router.include_router(reviews.router)
