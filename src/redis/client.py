"""Async Redis client utilities and lifespan management."""

import redis.asyncio as redis

from src.utils.settings.redis import RedisSettings
from src.utils.logger import get_logger

logger = get_logger(__name__)

# Shared by the cache helpers, the realtime publisher and each pub/sub consumer
_redis_pool: redis.ConnectionPool | None = None


def _ensure_redis_pool() -> redis.ConnectionPool:
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = redis.ConnectionPool.from_url(
            RedisSettings().REDIS_URL, decode_responses=True
        )
    return _redis_pool


async def get_redis_client() -> redis.Redis:
    """Get Redis client for dependency injection and direct usage."""
    return redis.Redis(connection_pool=_ensure_redis_pool())


async def close_redis_pool() -> None:
    """Close Redis connection pool - called during app shutdown."""
    global _redis_pool
    if _redis_pool:
        await _redis_pool.disconnect()
        _redis_pool = None
        logger.info("Redis connection pool closed")
