"""
Response schemas for owner dashboards and forecasts.
"""

from datetime import datetime

from pydantic import BaseModel


class Overview(BaseModel):
    total_hotels: int
    total_guests: int
    total_bookings: int
    recent_bookings: int
    total_revenue: float
    recent_revenue: float
    revenue_growth: float
    occupancy_rate: float
    cancelled_bookings: int


class StatusBucket(BaseModel):
    name: str
    value: int


class Destination(BaseModel):
    city: str
    count: int
    total_revenue: float
    avg_price: float


class DailyPoint(BaseModel):
    date: str
    bookings: int
    revenue: float


class HotelPerformance(BaseModel):
    hotel_id: int
    name: str
    city: str
    price_per_night: float
    booking_count: int
    total_revenue: float
    cancelled_count: int
    occupancy: float


class Insight(BaseModel):
    type: str
    message: str


class DashboardResponse(BaseModel):
    overview: Overview
    status_breakdown: list[StatusBucket]
    popular_destinations: list[Destination]
    daily_bookings: list[DailyPoint]
    hotel_performance: list[HotelPerformance]
    insights: list[Insight]
    last_updated: datetime
    cached: bool = False


class WeeklyPoint(BaseModel):
    week: str
    bookings: int
    revenue: float


class ForecastPoint(WeeklyPoint):
    confidence: float


class Trends(BaseModel):
    booking_trend: str
    revenue_trend: str


class ForecastResponse(BaseModel):
    historical: list[WeeklyPoint]
    forecasts: list[ForecastPoint]
    seasonal_growth: float
    trends: Trends
    last_updated: datetime
    cached: bool = False
