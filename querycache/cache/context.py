"""Tenant-scoped cache context.

One :class:`CacheContext` is built when a tenant is entered and handed to
every component; nothing in the core reads module-level state.
"""

from __future__ import annotations

from typing import Optional

from querycache.logging_config import get_logger
from querycache.settings import Settings, get_settings

from .generation import GenerationTracker
from .invalidation import InvalidationTrigger
from .query_cache import Hydrator, QueryCache
from .scope import QueryScope
from .store import CacheStore

logger = get_logger(name=__name__)


class CacheContext:
    """Wires the tracker, trigger and query cache of one tenant together."""

    def __init__(
        self,
        store: CacheStore,
        hydrator: Hydrator,
        tenant_id: str = "main",
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.store = store
        self.tracker = GenerationTracker(store, self.settings, tenant_id)
        self.trigger = InvalidationTrigger(self.tracker)
        self.query_cache = QueryCache(store, self.tracker, hydrator, self.settings)

    @property
    def tenant_id(self) -> str:
        return self.tracker.tenant_id

    def new_scope(self) -> QueryScope:
        return self.query_cache.new_scope()

    async def on_context_switch(self, new_tenant: str, previous_tenant: Optional[str] = None) -> None:
        """Point the cache at another tenant's generation (no-op for the same tenant)."""
        if new_tenant == previous_tenant:
            return
        logger.debug("Switching query cache from tenant '{}' to '{}'", previous_tenant, new_tenant)
        await self.tracker.switch_tenant(new_tenant, previous_tenant)
