"""Cache generation tracking.

The active cache group is ``group_prefix + generation``. Advancing the
generation renames the addressable namespace, which invalidates every
entry written under the previous generation without touching them; the
store expires the orphans on its own.
"""

from __future__ import annotations

import time
from typing import Optional

from querycache.logging_config import get_logger
from querycache.settings import Settings

from .keys import group_name, tenant_group
from .store import CacheStore

logger = get_logger(name=__name__)


def _parse_generation(raw) -> Optional[int]:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


class GenerationTracker:
    """Owns the generation counter of one tenant at a time."""

    def __init__(self, store: CacheStore, settings: Settings, tenant_id: str = "main"):
        self.store = store
        self.settings = settings
        self.tenant_id = tenant_id
        self.generation: Optional[int] = None
        self.group: Optional[str] = None
        # Whether this process primed anything since its last advance.
        self.dirty = True

    @property
    def _incrementor_group(self) -> str:
        return tenant_group(self.tenant_id, self.settings.incrementor_group)

    def scoped(self, group: str) -> str:
        """Qualify a cache group with the current tenant."""
        return tenant_group(self.tenant_id, group)

    async def current_group(self) -> str:
        """Return the active cache group, loading the generation on first use."""
        if self.generation is None:
            await self._load()
        return self.group

    async def advance_generation(self) -> int:
        """Move every subsequent lookup to a fresh, empty group."""
        key, group = self.settings.incrementor_key, self._incrementor_group
        value = await self.store.incr(key, group, 1)
        if value is None:
            value = await self._reseed()
        if len(str(value)) > self.settings.generation_max_length:
            await self.store.set(key, group, 0)
            value = 0
        self._use(value)
        self.dirty = False
        logger.info(
            "Advanced cache generation for tenant '{}' to {}",
            self.tenant_id,
            value,
        )
        return value

    async def switch_tenant(self, new_tenant: str, previous_tenant: Optional[str] = None) -> None:
        """Reload the generation when the surrounding context changes tenant."""
        if new_tenant == previous_tenant:
            return
        self.tenant_id = new_tenant
        self.generation = None
        self.group = None
        self.dirty = True
        await self._load()

    async def refresh(self) -> str:
        """Re-read the generation so advances made by other processes are seen."""
        await self._load()
        return self.group

    def mark_written(self) -> None:
        self.dirty = True

    async def _load(self) -> None:
        key, group = self.settings.incrementor_key, self._incrementor_group
        raw = await self.store.get(key, group)
        value = _parse_generation(raw)
        if value is None and raw is not None:
            # The read worked but the counter is corrupt: replace it outright.
            value = self._floor()
            await self.store.set(key, group, value)
        elif value is None:
            value = await self._seed(self._floor())
        if value is None:
            # A missing key cannot be told apart from a failed read, so stay
            # on the last known generation.
            if self.generation is not None:
                logger.warning(
                    "Cache generation unreadable for tenant '{}'; keeping {}",
                    self.tenant_id,
                    self.generation,
                )
                return
            value = self._floor()
        self._use(value)
        logger.debug("Loaded cache generation {} for tenant '{}'", value, self.tenant_id)

    def _floor(self) -> int:
        """Lowest safe seed: the clock, never at or below the last known generation."""
        return max(int(time.time()), (self.generation if self.generation is not None else -1) + 1)

    async def _seed(self, candidate: int) -> Optional[int]:
        """Create the counter if it is absent; return what the store now holds."""
        key, group = self.settings.incrementor_key, self._incrementor_group
        if await self.store.add(key, group, candidate):
            return candidate
        return _parse_generation(await self.store.get(key, group))

    async def _reseed(self) -> int:
        # The counter was evicted or the store failed.
        key, group = self.settings.incrementor_key, self._incrementor_group
        candidate = self._floor()
        if await self.store.add(key, group, candidate):
            return candidate
        value = await self.store.incr(key, group, 1)
        if value is not None:
            return value
        logger.warning(
            "Cache store unavailable while advancing tenant '{}'; using generation {} locally",
            self.tenant_id,
            candidate,
        )
        return candidate

    def _use(self, value: int) -> None:
        self.generation = value
        self.group = group_name(self.settings.group_prefix, value)
