"""Shared fixtures: an in-memory cache store and a recording hydrator."""

import pytest

from querycache.cache import CacheContext
from querycache.settings import Settings


class FakeCacheStore:
    """In-memory stand-in for the grouped cache store."""

    def __init__(self):
        self.data = {}
        self.available = True
        # Reads fail while the data stays put, like a flaky connection.
        self.fail_gets = False
        self.sets = []

    async def get(self, key, group):
        if not self.available or self.fail_gets:
            return None
        return self.data.get((group, key))

    async def set(self, key, group, value, ttl=None):
        if not self.available:
            return False
        self.data[(group, key)] = value
        self.sets.append((group, key, value, ttl))
        return True

    async def add(self, key, group, value, ttl=None):
        if not self.available or (group, key) in self.data:
            return False
        return await self.set(key, group, value, ttl)

    async def incr(self, key, group, amount=1):
        if not self.available or (group, key) not in self.data:
            return None
        try:
            value = int(self.data[(group, key)]) + amount
        except (TypeError, ValueError):
            return None
        self.data[(group, key)] = value
        return value

    def generation(self, tenant_id="main"):
        return self.data.get((f"{tenant_id}:cache_incrementors", "query_cache"))


class RecordingHydrator:
    """Turns identifiers into post dicts and remembers what it was asked for."""

    def __init__(self, missing=()):
        self.calls = []
        self.missing = set(missing)

    async def __call__(self, identifier):
        self.calls.append(identifier)
        if identifier in self.missing:
            return None
        return {"id": identifier, "title": f"Post {identifier}"}


@pytest.fixture
def settings():
    return Settings(
        redis_url="redis://localhost:6379/15",
        group_prefix="query_cache_",
        incrementor_key="query_cache",
        incrementor_group="cache_incrementors",
        generation_max_length=10,
        entry_ttl_seconds=600,
    )


@pytest.fixture
def store():
    store = FakeCacheStore()
    store.data[("main:cache_incrementors", "query_cache")] = 1700000000
    return store


@pytest.fixture
def hydrator():
    return RecordingHydrator()


@pytest.fixture
def context(store, hydrator, settings):
    return CacheContext(store, hydrator, tenant_id="main", settings=settings)


@pytest.fixture
def cache(context):
    return context.query_cache
