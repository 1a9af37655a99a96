"""
Redis caching for owner analytics.

CACHING STRATEGY
================

What we cache:
  - Dashboard and forecast responses per owner (JSON-serialized)
  - Key pattern: "analytics:{kind}:owner={owner_id}"

Why:
  - Both responses scan every booking of every hotel the owner has
  - Owners refresh dashboards far more often than bookings change

Invalidation strategy:
  - On any booking write (create, cancel, ID review, completion): unlink all
    "analytics:*" keys. Routes commit first, so a dashboard read racing
    the invalidation cannot re-cache pre-write numbers. A booking changes
    the numbers of exactly one owner, but the prefix scan keeps the write
    path free of an owner lookup.
  - TTL-based expiry as safety net (ANALYTICS_CACHE_TTL)

Why NOT cache availability:
  - The calendar must reflect live bookings; stale ranges invite conflicts

Redis is optional. When disabled or unreachable, every call degrades to a
cache miss and the request is served from the database.
"""

import json
from typing import Optional

import redis.asyncio as redis

from hotel_booking.core.config import get_settings
from hotel_booking.core.logging import get_logger
from hotel_booking.core.metrics import record_cache_lookup, record_cache_write

logger = get_logger(__name__)
settings = get_settings()

KEY_PREFIX = "analytics:"
SCAN_BATCH = 100

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Shared client, created on first use. None when Redis is disabled or down."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None
    if _redis_client is not None:
        return _redis_client

    client = redis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
        socket_connect_timeout=2,
        socket_timeout=2,
        health_check_interval=30,
    )
    try:
        await client.ping()
    except redis.RedisError as e:
        logger.error("redis_connection_failed", url=settings.REDIS_URL, error=str(e))
        await client.aclose()
        return None

    logger.info("redis_connected", url=settings.REDIS_URL)
    _redis_client = client
    return _redis_client


async def close_redis() -> None:
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


def cache_key(kind: str, owner_id: int) -> str:
    return f"{KEY_PREFIX}{kind}:owner={owner_id}"


async def get_cached_analytics(kind: str, owner_id: int) -> Optional[dict]:
    client = await get_redis()
    if client is None:
        return None

    key = cache_key(kind, owner_id)
    try:
        raw = await client.get(key)
    except redis.RedisError as e:
        logger.error("cache_get_error", key=key, error=str(e))
        return None

    record_cache_lookup(hit=raw is not None)
    return json.loads(raw) if raw else None


async def set_cached_analytics(kind: str, owner_id: int, data: dict) -> None:
    client = await get_redis()
    if client is None:
        return

    key = cache_key(kind, owner_id)
    try:
        await client.set(key, json.dumps(data, default=str), ex=settings.ANALYTICS_CACHE_TTL)
    except redis.RedisError as e:
        logger.error("cache_set_error", key=key, error=str(e))
        return
    record_cache_write()


async def invalidate_analytics_cache() -> None:
    """Drop every cached analytics response, SCANning the prefix in batches."""
    client = await get_redis()
    if client is None:
        return

    deleted = 0
    batch: list[str] = []
    try:
        async for key in client.scan_iter(match=f"{KEY_PREFIX}*", count=SCAN_BATCH):
            batch.append(key)
            if len(batch) >= SCAN_BATCH:
                deleted += await client.unlink(*batch)
                batch.clear()
        if batch:
            deleted += await client.unlink(*batch)
    except redis.RedisError as e:
        logger.error("cache_invalidation_error", error=str(e))
        return
    logger.debug("cache_invalidated", keys_deleted=deleted)


async def get_cache_stats() -> dict:
    """Server hit ratio plus the number of live analytics entries, for /health."""
    client = await get_redis()
    if client is None:
        return {"status": "disabled"}

    try:
        stats = await client.info("stats")
        entries = 0
        async for _ in client.scan_iter(match=f"{KEY_PREFIX}*", count=SCAN_BATCH):
            entries += 1
    except redis.RedisError as e:
        return {"status": "error", "error": str(e)}

    hits, misses = stats.get("keyspace_hits", 0), stats.get("keyspace_misses", 0)
    return {
        "status": "connected",
        "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        "analytics_entries": entries,
    }
