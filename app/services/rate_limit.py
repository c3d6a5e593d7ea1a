"""Rate limiting service using Redis."""

from datetime import timedelta

import redis.asyncio as redis
from fastapi import HTTPException, status

from app.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


def review_rate_key(user_id: int | None, ip_address: str) -> str:
    """Logged in users are limited per account, anonymous submitters per IP."""
    if user_id is not None:
        return f"review_rate:user_{user_id}"
    return f"review_rate:ip_{ip_address}"


async def check_review_rate_limit(key: str, redis_client: redis.Redis) -> None:  # type: ignore[type-arg]
    """
    Enforce the review submission rate limit.

    Limit: 3 reviews per 15 minutes (configurable via REVIEW_RATE_LIMIT and
    REVIEW_RATE_WINDOW_MINUTES).

    Uses Redis for fast lookups and automatic expiration.
    Gracefully degrades if Redis is unavailable (allows the request).

    Args:
        key: Rate limit key from review_rate_key()
        redis_client: Redis client instance

    Raises:
        HTTPException: 429 if rate limit exceeded
    """
    window = timedelta(minutes=settings.REVIEW_RATE_WINDOW_MINUTES)
    try:
        count_raw = await redis_client.get(key)
        count = int(count_raw) if count_raw else 0

        if count >= settings.REVIEW_RATE_LIMIT:
            logger.warning(
                "review_rate_limit_exceeded",
                key=key,
                count=count,
                limit=settings.REVIEW_RATE_LIMIT,
            )
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many review submissions, please wait before posting another review.",
                headers={"Retry-After": str(int(window.total_seconds()))},
            )

        pipe = redis_client.pipeline()
        pipe.incr(key)
        if count == 0:
            # First submission in this window - set expiration
            pipe.expire(key, window)
        await pipe.execute()

        logger.debug(
            "review_rate_check",
            key=key,
            count=count + 1,
            limit=settings.REVIEW_RATE_LIMIT,
        )
    except HTTPException:
        raise
    except Exception:
        logger.warning("review_rate_limit_redis_error", key=key, exc_info=True)
