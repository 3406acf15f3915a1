"""Redis client lifecycle for the query cache.

One process-wide ``redis.asyncio`` client backs the grouped
:class:`RedisCacheStore`. Identifier lists and the generation counters are
plain strings, so responses are decoded. :func:`init_cache_store` is the
usual entry point; the lower-level helpers mirror ``database.py``.
"""

from redis.asyncio import Redis

from querycache.cache.store import RedisCacheStore
from querycache.logging_config import get_logger
from querycache.settings import Settings, get_settings

logger = get_logger(name=__name__)

_client: Redis | None = None


async def init_redis(url: str | None = None) -> Redis:
    """Connect the shared client and ping it; ``url`` defaults to ``Settings.redis_url``."""
    global _client
    url = url or get_settings().redis_url
    _client = Redis.from_url(
        url,
        decode_responses=True,
        protocol=3,
    )
    await _client.ping()
    logger.info("Query cache Redis connected: {}", url)
    return _client


def get_redis() -> Redis:
    if _client is None:
        raise RuntimeError(
            "Query cache Redis client not initialized. Call init_redis() first."
        )
    return _client


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        logger.info("Query cache Redis closed")
    _client = None


async def init_cache_store(settings: Settings | None = None) -> RedisCacheStore:
    """Connect to Redis and wrap the client in the grouped cache store."""
    settings = settings or get_settings()
    client = await init_redis(settings.redis_url)
    return RedisCacheStore(client, key_prefix=settings.key_prefix)
