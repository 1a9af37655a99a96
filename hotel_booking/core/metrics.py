"""
Prometheus instruments for the booking core, served at /metrics.
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

BOOKING_OUTCOMES = ("success", "conflict", "invalid", "error")

booking_attempts = Counter(
    "booking_attempts_total",
    "Booking creation attempts by outcome",
    ["status"],
)
booking_latency = Histogram(
    "booking_latency_seconds",
    "Wall time of POST /hotels/{id}/bookings",
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)
booking_retries = Counter(
    "booking_version_retries_total",
    "Creation attempts repeated after losing the hotel version race",
)
booking_transitions = Counter(
    "booking_transitions_total",
    "Bookings moved into a status",
    ["to_status"],
)
analytics_cache = Counter(
    "analytics_cache_operations_total",
    "Analytics cache lookups and writes",
    ["operation", "result"],
)


def metrics_endpoint() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


def record_booking_attempt(status: str) -> None:
    if status not in BOOKING_OUTCOMES:
        raise ValueError(f"unknown booking outcome: {status}")
    booking_attempts.labels(status=status).inc()


def record_retry() -> None:
    booking_retries.inc()


def record_transition(to_status: str, count: int = 1) -> None:
    booking_transitions.labels(to_status=to_status).inc(count)


def record_cache_lookup(hit: bool) -> None:
    analytics_cache.labels(operation="get", result="hit" if hit else "miss").inc()


def record_cache_write() -> None:
    analytics_cache.labels(operation="set", result="stored").inc()
