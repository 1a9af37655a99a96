"""
ASGI application, its lifespan hooks and the background completion sweep.
"""

import asyncio
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import InterfaceError, OperationalError

from hotel_booking.api.middleware import RequestLoggingMiddleware
from hotel_booking.api.router import api_router
from hotel_booking.core.config import get_settings
from hotel_booking.core.exceptions import BookingServiceError, BookingValidationError, DependencyFailureError
from hotel_booking.core.logging import get_logger, setup_logging
from hotel_booking.core.metrics import metrics_endpoint
from hotel_booking.db.session import AsyncSessionLocal
from hotel_booking.services.booking_service import complete_past_bookings
from hotel_booking.services.cache_service import close_redis, get_cache_stats, get_redis, invalidate_analytics_cache

settings = get_settings()
logger = get_logger(__name__)


async def completion_sweep(interval: float) -> None:
    """Periodically move stays whose check-out has passed to COMPLETED."""
    while True:
        await asyncio.sleep(interval)
        try:
            async with AsyncSessionLocal() as session:
                completed = await complete_past_bookings(session)
                await session.commit()
            if completed:
                await invalidate_analytics_cache()
        except (OperationalError, InterfaceError) as e:
            logger.error("completion_sweep_failed", error=str(e))


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    if await get_redis() is not None:
        logger.info("analytics_cache_ready")
    else:
        logger.warning("redis_unavailable", message="Running without analytics cache")

    sweep_task = None
    if settings.COMPLETION_SWEEP_INTERVAL_SECONDS > 0:
        sweep_task = asyncio.create_task(completion_sweep(settings.COMPLETION_SWEEP_INTERVAL_SECONDS))

    yield

    if sweep_task is not None:
        sweep_task.cancel()
        with suppress(asyncio.CancelledError):
            await sweep_task
    await close_redis()
    logger.info("application_stopped")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Hotel booking API with double-booking-safe reservations",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router)


@app.exception_handler(BookingServiceError)
async def booking_error_handler(request: Request, exc: BookingServiceError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{field}: {err['msg']}" if field else err["msg"])
    error = BookingValidationError("; ".join(problems) or "Invalid request")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(OperationalError)
@app.exception_handler(InterfaceError)
async def database_error_handler(request: Request, exc: Exception):
    logger.error("database_unavailable", error=str(exc))
    error = DependencyFailureError("Database temporarily unavailable")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "cache": await get_cache_stats(),
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "service": settings.APP_NAME,
        "docs": app.docs_url,
        "health": "/health",
    }
