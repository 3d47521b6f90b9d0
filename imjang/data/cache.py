"""Redis response cache for third-party lookups.

Entries are keyed by the normalized query text. Lookups that found nothing are
stored too, under a shorter TTL. An unreachable Redis never fails a lookup.
"""

import functools
import json
import logging
from typing import Any, Awaitable, Callable

import redis.asyncio as redis
from redis.exceptions import RedisError

from imjang.config import settings

logger = logging.getLogger(__name__)

KEY_NAMESPACE = "imjang"
_MISS = {"__miss__": True}

_redis_client: redis.Redis | None = None

Lookup = Callable[[Any, str], Awaitable[dict | None]]


async def get_redis() -> redis.Redis:
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(settings.redis_url, decode_responses=True)
    return _redis_client


async def close_redis() -> None:
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


def normalize_query(query: str) -> str:
    """'  서울   강남구 ' -> '서울 강남구'."""
    return " ".join(query.split())


def cache_key(prefix: str, query: str) -> str:
    return f"{KEY_NAMESPACE}:{prefix}:{normalize_query(query)}"


def cached_lookup(prefix: str, ttl_seconds: int | None = None, miss_ttl_seconds: int | None = None):
    """Cache an async `method(self, query) -> dict | None`.

    Args:
        prefix: Key prefix, e.g. "kakao:address"
        ttl_seconds: Lifetime of a found result (default settings.lookup_cache_ttl_seconds)
        miss_ttl_seconds: Lifetime of a None result (default settings.lookup_miss_ttl_seconds)
    """
    def decorator(func: Lookup) -> Lookup:
        @functools.wraps(func)
        async def wrapper(self: Any, query: str) -> dict | None:
            key = cache_key(prefix, query)
            try:
                r = await get_redis()
                hit = await r.get(key)
            except (RedisError, OSError) as e:
                logger.warning("Redis unavailable, skipping cache for %s: %s", key, e)
                return await func(self, query)

            if hit is not None:
                logger.debug("Cache hit: %s", key)
                value = json.loads(hit)
                return None if value == _MISS else value

            result = await func(self, query)
            if result is None:
                ttl = miss_ttl_seconds or settings.lookup_miss_ttl_seconds
                payload = _MISS
            else:
                ttl = ttl_seconds or settings.lookup_cache_ttl_seconds
                payload = result
            try:
                await r.setex(key, ttl, json.dumps(payload, ensure_ascii=False))
            except (RedisError, OSError) as e:
                logger.warning("Failed to write cache for %s: %s", key, e)
            return result
        return wrapper
    return decorator
