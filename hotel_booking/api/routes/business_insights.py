"""
Owner analytics endpoints with Redis caching.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.core.logging import get_logger
from hotel_booking.core.security import CurrentUser, require_roles
from hotel_booking.db.session import get_db
from hotel_booking.models.user import UserRole
from hotel_booking.schemas.analytics import DashboardResponse, ForecastResponse
from hotel_booking.services.analytics_service import dashboard_summary, forecast
from hotel_booking.services.cache_service import get_cached_analytics, set_cached_analytics

logger = get_logger(__name__)
router = APIRouter(prefix="/business-insights", tags=["Business Insights"])
staff = require_roles(UserRole.HOTEL_OWNER, UserRole.ADMIN)


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard_endpoint(
    actor: CurrentUser = Depends(staff),
    db: AsyncSession = Depends(get_db),
):
    """Bookings, revenue, occupancy and status breakdown across the caller's hotels."""
    cached = await get_cached_analytics("dashboard", actor.id)
    if cached:
        logger.info("dashboard_cache_hit", owner_id=actor.id)
        cached["cached"] = True
        return DashboardResponse(**cached)

    response = DashboardResponse(**await dashboard_summary(db, actor.id))
    await set_cached_analytics("dashboard", actor.id, response.model_dump(mode="json"))
    return response


@router.get("/forecast", response_model=ForecastResponse)
async def forecast_endpoint(
    actor: CurrentUser = Depends(staff),
    db: AsyncSession = Depends(get_db),
):
    """Weekly history of the last 60 days and a 4-week linear projection."""
    cached = await get_cached_analytics("forecast", actor.id)
    if cached:
        logger.info("forecast_cache_hit", owner_id=actor.id)
        cached["cached"] = True
        return ForecastResponse(**cached)

    response = ForecastResponse(**await forecast(db, actor.id))
    await set_cached_analytics("forecast", actor.id, response.model_dump(mode="json"))
    return response
