import hashlib
import pickle
import redis.asyncio as redis
from functools import wraps
from uuid import UUID

from src.utils.logger import get_logger
from src.utils.settings.redis import RedisSettings

logger = get_logger(__name__)

# Long string arguments (bearer tokens) are hashed before they become key parts
_MAX_RAW_KEY_PART = 64


def _key_part(value) -> str:
    text = str(value)
    if len(text) > _MAX_RAW_KEY_PART:
        return hashlib.sha256(text.encode()).hexdigest()
    return text.replace(":", "_").replace("*", "_")


def _generate_cache_key(func, args: tuple, kwargs: dict) -> str:
    """Generate cache key from function name and business parameters only."""
    key_parts = [func.__module__.replace(".", ":"), func.__qualname__.replace(".", ":")]

    # Only include simple types in cache key (skip AsyncSession, services, etc.)
    for arg in args:
        if isinstance(arg, (str, int, float, bool, UUID)):
            key_parts.append(_key_part(arg))

    for k, v in sorted(kwargs.items()):
        if isinstance(v, (str, int, float, bool, UUID)):
            key_parts.append(f"{k}={_key_part(v)}")

    return "cache:" + ":".join(key_parts)


async def _get_cache(key: str):
    """Get value from Redis cache."""
    try:
        redis_client = redis.from_url(RedisSettings().REDIS_URL, decode_responses=False)
        value = await redis_client.get(key)
        await redis_client.aclose()

        if value is not None:
            return pickle.loads(value)
        return None
    except Exception as e:
        logger.error(f"Failed to get cache key '{key}': {e}")
        return None


async def _set_cache(key: str, value, ttl: int, tags: list[str] | None = None) -> bool:
    """Set value in Redis cache with TTL and optional tags."""
    try:
        redis_client = redis.from_url(RedisSettings().REDIS_URL, decode_responses=False)
        await redis_client.setex(key, ttl, pickle.dumps(value))

        all_tags = sorted(set((tags or []) + _extract_tags_from_result(value)))

        # Track cache key by tags for easy invalidation
        for tag in all_tags:
            tag_key = f"cache:tag:{tag}"
            await redis_client.sadd(tag_key, key)
            await redis_client.expire(tag_key, ttl)

        await redis_client.aclose()
        return True
    except Exception as e:
        logger.error(f"Failed to set cache key '{key}': {e}")
        return False


def _extract_tags(args: tuple, kwargs: dict) -> list[str]:
    """Extract UUIDs from args/kwargs for cache tagging."""
    tags = []

    for k, v in kwargs.items():
        if isinstance(v, UUID):
            if "user" in k.lower():
                tags.append(f"user:{v}")
            elif "org" in k.lower():
                tags.append(f"org:{v}")

    return tags


def _extract_tags_from_result(value) -> list[str]:
    """Extract tags from cached result values (e.g., AuthContext)."""
    tags = []

    user_id = getattr(value, "user_id", None)
    if isinstance(user_id, UUID):
        tags.append(f"user:{user_id}")
    organization_id = getattr(value, "organization_id", None)
    if isinstance(organization_id, UUID):
        tags.append(f"org:{organization_id}")

    return tags


def cached(ttl: int = 900):
    """Cache decorator with Redis backend.

    Results are tagged by user and organization so role changes can evict them.
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            cache_key = _generate_cache_key(func, args, kwargs)

            cached_value = await _get_cache(cache_key)
            if cached_value is not None:
                logger.debug(f"Cache hit: {cache_key}")
                return cached_value

            result = await func(*args, **kwargs)

            tags = _extract_tags(args, kwargs)
            await _set_cache(cache_key, result, ttl, tags)

            logger.debug(f"Cached: {cache_key}")
            return result

        return wrapper

    return decorator


async def _invalidate_by_tag(tag: str) -> int:
    """Invalidate all cache entries with a specific tag."""
    try:
        redis_client = redis.from_url(RedisSettings().REDIS_URL, decode_responses=True)

        tag_key = f"cache:tag:{tag}"
        cache_keys = await redis_client.smembers(tag_key)

        if not cache_keys:
            await redis_client.aclose()
            return 0

        deleted = await redis_client.delete(*cache_keys, tag_key)
        await redis_client.aclose()

        logger.info(f"Invalidated {len(cache_keys)} entries for {tag}")
        return deleted

    except Exception as e:
        logger.error(f"Failed to invalidate tag '{tag}': {e}")
        return 0


async def invalidate_user_cache(user_id: UUID) -> int:
    """Invalidate all cache entries for a specific user."""
    count = await _invalidate_by_tag(f"user:{user_id}")
    logger.info(f"Invalidated {count} cache entries for user {user_id}")
    return count


async def invalidate_user_auth_cache(user_id: UUID) -> int:
    """Invalidate the cached auth context after the user's role changed."""
    return await invalidate_user_cache(user_id)
