"""Shared Redis connection for IncorpDesk.

Redis is optional: with ``REDIS_URL`` unset, ``get_redis()`` returns None
and callers skip whatever they would have stored there.
"""

import logging
from typing import Optional

import redis.asyncio as redis
from app.config import settings

logger = logging.getLogger(__name__)

# Global Redis connection pool
_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis client connection, or None when not configured."""
    global _redis_client
    if not settings.redis_url:
        return None
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=50,
        )
    return _redis_client


async def close_redis():
    """Close Redis connection (call on app shutdown)."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None
        logger.info("Redis connection closed")
