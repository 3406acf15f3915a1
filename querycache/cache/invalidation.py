"""Cache invalidation.

Every data-mutating site reports to :meth:`InvalidationTrigger.on_data_changed`,
which advances the generation (an O(1) flush of the whole tenant cache)
unless invalidation is currently suppressed or the change is a preview or
autosave that never reaches readers.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from pydantic import BaseModel

from querycache.logging_config import get_logger

from .generation import GenerationTracker

logger = get_logger(name=__name__)


class ChangeEvent(BaseModel):
    """Caller-supplied description of a data change."""

    object_type: str | None = None
    object_id: int | str | None = None
    preview: bool = False
    autosave: bool = False


class InvalidationTrigger:
    """Advances the cache generation when underlying data changes."""

    def __init__(self, tracker: GenerationTracker):
        self.tracker = tracker
        self.suppress_depth = 0
        self._coalesce_depth = 0
        self._flushed_in_batch = False

    @property
    def is_suppressed(self) -> bool:
        return self.suppress_depth > 0

    async def on_data_changed(self, event: Optional[ChangeEvent] = None) -> bool:
        """Invalidate the cache; returns whether the generation advanced."""
        if self.is_suppressed:
            logger.debug("Invalidation suppressed (depth {})", self.suppress_depth)
            return False
        if event is not None and (event.preview or event.autosave):
            logger.debug(
                "Skipping invalidation for {} change to {}:{}",
                "preview" if event.preview else "autosave",
                event.object_type,
                event.object_id,
            )
            return False
        if self._coalesce_depth and self._flushed_in_batch and not self.tracker.dirty:
            # Nothing was primed by this process since the last advance.
            return False

        await self.tracker.advance_generation()
        if self._coalesce_depth:
            self._flushed_in_batch = True
        return True

    # ------------------------------------------------------------------
    # Suppression
    # ------------------------------------------------------------------

    def suppress(self) -> None:
        self.suppress_depth += 1

    def unsuppress(self, force: bool = False) -> None:
        """Leave one suppression level; ``force`` re-enables invalidation outright."""
        if force:
            self.suppress_depth = 0
        elif self.suppress_depth > 0:
            self.suppress_depth -= 1

    @contextmanager
    def suppressed(self) -> Iterator[None]:
        self.suppress()
        try:
            yield
        finally:
            self.unsuppress()

    def begin_count_maintenance(self) -> None:
        """Counter bookkeeping is about to emit change notifications that are not content changes."""
        self.suppress()

    def end_count_maintenance(self) -> None:
        self.unsuppress()

    # ------------------------------------------------------------------
    # Coalescing
    # ------------------------------------------------------------------

    @contextmanager
    def coalescing(self) -> Iterator[None]:
        """Collapse repeated change signals of one logical operation into one advance.

        Only writes made by this process re-arm the flush. An entry another
        process primes between two signals stays reachable until the next
        advance, so keep the scope to one logical operation.
        """
        if self._coalesce_depth == 0:
            self._flushed_in_batch = False
        self._coalesce_depth += 1
        try:
            yield
        finally:
            self._coalesce_depth -= 1
            if self._coalesce_depth == 0:
                self._flushed_in_batch = False
