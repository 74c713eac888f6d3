"""Redis store for table snapshots and sessions.

Handles:
- Table snapshot cache (last-known copy of each remote table)
- Session tokens with TTL

TTL policies:
- Table snapshots: no TTL, replaced on every successful refresh
- Sessions: Settings.session_ttl_seconds (12 hours by default)
"""

import json
import logging
from typing import Any

import redis.asyncio as redis

from school_portal.settings import get_settings

# Key prefixes
PREFIX_TABLE = "table:"
PREFIX_SESSION = "session:"

# Redis client (initialized on startup)
_redis: redis.Redis | None = None
logger = logging.getLogger("uvicorn.error")


async def init_redis() -> None:
    """Initialize Redis connection."""
    global _redis
    settings = get_settings()
    _redis = redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )
    # Validate connectivity early (especially for `rediss://` in production).
    try:
        await _redis.ping()
    except Exception:
        await _redis.aclose()
        _redis = None
        raise
    logger.info("Redis connected")


async def close_redis() -> None:
    """Close Redis connection."""
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def _get_redis() -> redis.Redis:
    """Get Redis client instance."""
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis


# ============================================================
# Generic cache operations
# ============================================================


async def cache_get(key: str) -> str | None:
    """Get value from cache.

    Args:
        key: Cache key.

    Returns:
        Cached value or None if not found.
    """
    return await _get_redis().get(key)


async def cache_set(key: str, value: str, ttl: int | None = None) -> None:
    """Set value in cache, with TTL when given.

    Args:
        key: Cache key.
        value: Value to cache.
        ttl: Time-to-live in seconds, or None to keep until overwritten.
    """
    if ttl is None:
        await _get_redis().set(key, value)
    else:
        await _get_redis().setex(key, ttl, value)


async def cache_delete(key: str) -> None:
    """Delete value from cache.

    Args:
        key: Cache key.
    """
    await _get_redis().delete(key)


async def cache_get_json(key: str) -> Any | None:
    """Get JSON value from cache.

    Args:
        key: Cache key.

    Returns:
        Parsed JSON value or None if not found.
    """
    value = await cache_get(key)
    if value:
        return json.loads(value)
    return None


async def cache_set_json(key: str, value: Any, ttl: int | None = None) -> None:
    """Set JSON value in cache.

    Args:
        key: Cache key.
        value: JSON-serialisable value.
        ttl: Time-to-live in seconds, or None.
    """
    await cache_set(key, json.dumps(value, default=str), ttl)


# ============================================================
# Table snapshots
# ============================================================


async def get_table_snapshot(table: str) -> list[dict[str, Any]] | None:
    """Get the cached snapshot of a table, or None if never cached."""
    payload = await cache_get_json(f"{PREFIX_TABLE}{table}")
    if isinstance(payload, list):
        return payload
    return None


async def set_table_snapshot(table: str, rows: list[dict[str, Any]]) -> None:
    """Replace the cached snapshot of a table."""
    await cache_set_json(f"{PREFIX_TABLE}{table}", rows)


# ============================================================
# Sessions
# ============================================================


async def get_session_payload(token: str) -> dict[str, Any] | None:
    """Get session payload for a bearer token."""
    payload = await cache_get_json(f"{PREFIX_SESSION}{token}")
    if isinstance(payload, dict):
        return payload
    return None


async def set_session_payload(token: str, payload: dict[str, Any], ttl: int) -> None:
    """Store session payload for a bearer token."""
    await cache_set_json(f"{PREFIX_SESSION}{token}", payload, ttl)


async def delete_session_payload(token: str) -> None:
    """Forget a bearer token."""
    await cache_delete(f"{PREFIX_SESSION}{token}")
