"""
Redis caching service for the public event listing.

CACHING STRATEGY
================

What we cache:
  - The event listing response (events with their slots and seat counts)
  - Cache key pattern: "events:list:kind={kind}"

Why:
  - During a registration rush the listing is polled far more often than
    anything else, and every poll would otherwise hit the slot table
    that bookings are writing to.

Invalidation strategy:
  - On every committed booking and every admin change, delete all
    "events:list:*" keys (seat counts changed)
  - Short TTL as a safety net

What is never cached:
  - Single-event reads and anything inside the booking transaction. The
    booking path always reads the database; a stale cache can show a
    wrong seat count for a moment but can never cause an overbooking.

Redis is optional: with REDIS_ENABLED=false, or Redis unreachable, every
function here degrades to a no-op / miss.
"""

import json
from typing import Optional

import redis.asyncio as redis
from festival_booking.core.config import get_settings
from festival_booking.core.logging import get_logger
from festival_booking.core.metrics import record_cache_operation

logger = get_logger(__name__)
settings = get_settings()

EVENT_LIST_PREFIX = "events:list:"

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        try:
            _redis_client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
                retry_on_timeout=True,
            )
            await _redis_client.ping()
            logger.info("redis_connected", url=settings.REDIS_URL)
        except Exception as e:
            logger.error("redis_connection_failed", error=str(e))
            _redis_client = None
            return None

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def _make_event_list_key(kind: Optional[str]) -> str:
    return f"{EVENT_LIST_PREFIX}kind={kind or 'all'}"


async def get_cached_events(kind: Optional[str]) -> Optional[dict]:
    client = await get_redis()
    if not client:
        return None

    key = _make_event_list_key(kind)
    try:
        data = await client.get(key)
        record_cache_operation("get", hit=data is not None)
        if data:
            return json.loads(data)
    except Exception as e:
        logger.error("cache_get_error", key=key, error=str(e))

    return None


async def set_cached_events(kind: Optional[str], data: dict) -> None:
    client = await get_redis()
    if not client:
        return

    key = _make_event_list_key(kind)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        record_cache_operation("set", hit=False)
    except Exception as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_event_cache() -> None:
    """Drop every cached listing. Called after any seat count or catalogue change."""
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match=f"{EVENT_LIST_PREFIX}*", count=100):
            await client.delete(key)
            deleted += 1
        logger.debug("cache_invalidated", keys_deleted=deleted)
    except Exception as e:
        logger.error("cache_invalidation_error", error=str(e))


async def get_cache_stats() -> dict:
    """Redis status for the health endpoint."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        }
    except Exception as e:
        return {"status": "error", "error": str(e)}
