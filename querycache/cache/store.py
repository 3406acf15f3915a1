"""Cache store boundary.

The core only needs get/set/add/increment addressed by ``(key, group)``.
:class:`RedisCacheStore` implements that on top of ``redis.asyncio``; any
object with the same coroutines can be passed instead.

Every Redis failure is logged and reported as "not cached" (``None`` /
``False``), never raised, so callers fall back to the source of truth.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol

from redis.asyncio import Redis

from querycache.logging_config import get_logger

from .keys import build_store_key

logger = get_logger(name=__name__)

_INCR_EXISTING = """
if redis.call("EXISTS", KEYS[1]) == 1 then
    return redis.call("INCRBY", KEYS[1], ARGV[1])
end
return false
"""


class CacheStore(Protocol):
    async def get(self, key: str, group: str) -> Optional[Any]:
        ...

    async def set(self, key: str, group: str, value: Any, ttl: Optional[int] = None) -> bool:
        ...

    async def add(self, key: str, group: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Set only if missing; ``False`` if the key exists or the store failed."""
        ...

    async def incr(self, key: str, group: str, amount: int = 1) -> Optional[int]:
        """Atomically add ``amount``; ``None`` if the key is missing or the store failed."""
        ...


class RedisCacheStore:
    """Grouped key/value store backed by Redis."""

    def __init__(self, redis: Redis, key_prefix: str = "cache"):
        self.redis = redis
        self.key_prefix = key_prefix

    def _key(self, key: str, group: str) -> str:
        return build_store_key(self.key_prefix, group, key)

    async def get(self, key: str, group: str) -> Optional[Any]:
        redis_key = self._key(key, group)
        try:
            return await self.redis.get(redis_key)
        except Exception as e:
            logger.warning("Redis GET failed for {}: {}", redis_key, e)
            return None

    async def set(self, key: str, group: str, value: Any, ttl: Optional[int] = None) -> bool:
        redis_key = self._key(key, group)
        try:
            await self.redis.set(redis_key, value, ex=ttl)
            return True
        except Exception as e:
            logger.warning("Redis SET failed for {}: {}", redis_key, e)
            return False

    async def add(self, key: str, group: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Store ``value`` only if the key does not exist yet (SET NX)."""
        redis_key = self._key(key, group)
        try:
            return bool(await self.redis.set(redis_key, value, ex=ttl, nx=True))
        except Exception as e:
            logger.warning("Redis SET NX failed for {}: {}", redis_key, e)
            return False

    async def incr(self, key: str, group: str, amount: int = 1) -> Optional[int]:
        """Increment an existing counter.

        INCRBY on a missing key would silently restart the counter at
        ``amount`` and could land on a generation used before, so a missing
        key is reported as ``None`` and left to the caller to seed. The
        existence check and the increment run as one script so an eviction
        in between cannot recreate the key.
        """
        redis_key = self._key(key, group)
        try:
            value = await self.redis.eval(_INCR_EXISTING, 1, redis_key, amount)
        except Exception as e:
            logger.warning("Redis INCRBY failed for {}: {}", redis_key, e)
            return None
        if value is None or isinstance(value, bool):
            return None
        return int(value)
