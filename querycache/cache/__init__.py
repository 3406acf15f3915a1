"""Query result caching: generation tracking, lookup, assembly and invalidation."""

from .context import CacheContext
from .decorator import count_maintenance, invalidates
from .generation import GenerationTracker
from .invalidation import ChangeEvent, InvalidationTrigger
from .query_cache import Hydrator, QueryCache
from .scope import FoundCountState, QueryScope
from .store import CacheStore, RedisCacheStore

__all__ = [
    "CacheContext",
    "CacheStore",
    "ChangeEvent",
    "FoundCountState",
    "GenerationTracker",
    "Hydrator",
    "InvalidationTrigger",
    "QueryCache",
    "QueryScope",
    "RedisCacheStore",
    "count_maintenance",
    "invalidates",
]
