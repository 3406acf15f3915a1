"""Identifier-list caching for list queries.

Usage:
    scope = cache.new_scope()
    limits = cache.filter_limits(scope, "LIMIT 10 OFFSET 0")
    if await cache.filter_ids_request(scope, normalized_sql):
        rows = ...  # run the identifier query
    items = await cache.filter_results(scope, rows)
    if cache.filter_found_rows_query(scope, count_sql):
        found = ...  # run the count query
    found = await cache.filter_found_rows(scope, found)

A hit skips both queries; a miss runs them and primes the cache for the
next identical query under the same generation.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Iterable, List, Optional

from querycache.logging_config import get_logger
from querycache.settings import Settings

from .generation import GenerationTracker
from .keys import fingerprint
from .scope import FoundCountState, QueryScope
from .serialization import Identifier, deserialize_ids, serialize_ids
from .store import CacheStore

logger = get_logger(name=__name__)

Hydrator = Callable[[Identifier], Awaitable[Any]]


class QueryCache:
    """Looks up, primes and rehydrates cached identifier lists."""

    def __init__(
        self,
        store: CacheStore,
        tracker: GenerationTracker,
        hydrator: Hydrator,
        settings: Settings,
    ):
        self.store = store
        self.tracker = tracker
        self.hydrator = hydrator
        self.settings = settings

    def new_scope(self) -> QueryScope:
        return QueryScope()

    # ------------------------------------------------------------------
    # Fingerprinting & lookup
    # ------------------------------------------------------------------

    async def lookup(self, scope: QueryScope, normalized_query: str) -> Optional[List[Identifier]]:
        """Return the cached identifiers for a query, or ``None`` on a miss.

        Records the fingerprint and group on ``scope`` so priming and count
        resolution address the same entry without re-hashing the query.
        """
        if self.settings.reload_generation_per_query:
            await self.tracker.refresh()
        group = self.tracker.scoped(await self.tracker.current_group())
        scope.fingerprint = fingerprint(normalized_query)
        scope.group = group
        scope.cached_ids = None
        scope.primed = False

        identifiers = deserialize_ids(await self.store.get(scope.fingerprint, group))
        if identifiers is None:
            logger.debug("Query cache MISS: {}:{}", group, scope.fingerprint)
            return None

        scope.cached_ids = identifiers
        logger.debug(
            "Query cache HIT: {}:{} ({} ids)",
            group,
            scope.fingerprint,
            len(identifiers),
        )
        return identifiers

    async def prime_on_miss(self, scope: QueryScope, identifiers: Iterable[Identifier]) -> bool:
        """Store the identifiers of a missed query under its recorded fingerprint."""
        if not scope.looked_up:
            logger.warning("Cannot prime query cache before lookup")
            return False
        if scope.is_hit or scope.primed:
            logger.warning("Ignoring prime for already cached query {}", scope.fingerprint)
            return False

        stored = await self.store.set(
            scope.fingerprint,
            scope.group,
            serialize_ids(list(identifiers)),
            ttl=self.settings.entry_ttl_seconds,
        )
        scope.primed = True
        self.tracker.mark_written()
        return stored

    # ------------------------------------------------------------------
    # Result assembly
    # ------------------------------------------------------------------

    async def assemble(self, scope: QueryScope, rows: Optional[Iterable[Any]]) -> List[Any]:
        """Turn the hit's cached identifiers, or the miss's raw rows, into objects."""
        if scope.is_hit:
            identifiers = list(scope.cached_ids)
        else:
            identifiers = [self._extract_id(row) for row in rows or []]
            if scope.looked_up:
                await self.prime_on_miss(scope, identifiers)
        return await self._hydrate(identifiers)

    async def _hydrate(self, identifiers: List[Identifier]) -> List[Any]:
        # Sequential: hydrators commonly share one DB session.
        return [await self.hydrator(identifier) for identifier in identifiers]

    def _extract_id(self, row: Any) -> Identifier:
        field = self.settings.id_field
        if isinstance(row, (int, str)):
            return row
        if isinstance(row, Mapping):
            return row[field]
        mapping = getattr(row, "_mapping", None)
        if mapping is not None:
            return mapping[field]
        return getattr(row, field)

    # ------------------------------------------------------------------
    # Found-count coordination
    # ------------------------------------------------------------------

    def apply_limits(self, scope: QueryScope, limits: str, no_found_rows: bool = False) -> str:
        """Decide whether a found-count applies to this query; ``limits`` is returned as is."""
        scope.count_applicable = bool(limits and limits.strip()) and not no_found_rows
        return limits

    def should_compute_count(self, scope: QueryScope) -> bool:
        return scope.found_state in (FoundCountState.PENDING, FoundCountState.UNINITIALIZED)

    async def resolve_count(self, scope: QueryScope, candidate: int) -> int:
        """Return the cached count on a hit, ignoring ``candidate``; otherwise ``candidate``.

        The cached count is the length of the cached identifier list.
        """
        if scope.found_state is FoundCountState.CACHED:
            return scope.cached_count
        return candidate

    # ------------------------------------------------------------------
    # Host extension points
    # ------------------------------------------------------------------

    async def filter_ids_request(self, scope: QueryScope, normalized_query: str) -> str:
        """Blank the identifier query when its result is already cached."""
        if await self.lookup(scope, normalized_query) is not None:
            return ""
        return normalized_query

    async def filter_results(self, scope: QueryScope, rows: Optional[Iterable[Any]]) -> List[Any]:
        return await self.assemble(scope, rows)

    def filter_limits(self, scope: QueryScope, limits: str, no_found_rows: bool = False) -> str:
        return self.apply_limits(scope, limits, no_found_rows)

    def filter_found_rows_query(self, scope: QueryScope, sql: str) -> str:
        """Blank the count query unless a real count has to be computed."""
        if self.should_compute_count(scope):
            return sql
        return ""

    async def filter_found_rows(self, scope: QueryScope, found: int) -> int:
        return await self.resolve_count(scope, found)
