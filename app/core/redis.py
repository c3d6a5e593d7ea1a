"""
Redis connection for the review rate limiter.

One connection pool is shared by the process and closed at shutdown.
"""

from collections.abc import AsyncGenerator

import redis.asyncio as redis

from app.config import settings

_pool: redis.ConnectionPool | None = None


def get_redis_pool() -> redis.ConnectionPool:
    global _pool
    if _pool is None:
        _pool = redis.ConnectionPool.from_url(
            str(settings.REDIS_URL),
            encoding="utf-8",
            decode_responses=True,
        )
    return _pool


async def get_redis() -> AsyncGenerator[redis.Redis, None]:  # type: ignore[type-arg]
    """
    Dependency for getting an async redis client on the shared pool.
    """
    client = redis.Redis(connection_pool=get_redis_pool())
    try:
        yield client
    finally:
        await client.aclose()


async def close_redis() -> None:
    """Disconnect the shared pool (called from the app lifespan)."""
    global _pool
    if _pool is not None:
        await _pool.aclose()
        _pool = None
