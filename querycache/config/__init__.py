"""Connection lifecycle helpers for Redis and the query database."""

from .database import dispose_engine, get_engine, init_engine
from .redis import close_redis, get_redis, init_cache_store, init_redis

__all__ = [
    # Redis
    "init_redis",
    "get_redis",
    "close_redis",
    "init_cache_store",
    # Database
    "init_engine",
    "get_engine",
    "dispose_engine",
]
