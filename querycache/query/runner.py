"""Cached list-query runner over an async SQLAlchemy engine.

Drives the query cache extension points in the order a list query is
built and executed:

    limits -> identifier query -> results -> count query -> found rows
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from querycache.cache.context import CacheContext
from querycache.cache.keys import normalize_query
from querycache.config.database import get_engine
from querycache.logging_config import get_logger

from .models import ListQuery, QueryResult

logger = get_logger(name=__name__)


def build_limit_clause(limit: int | None, offset: int = 0) -> str:
    if not limit:
        return ""
    return f"LIMIT {int(limit)} OFFSET {int(offset)}"


def default_count_sql(ids_sql: str) -> str:
    return f"SELECT COUNT(*) FROM ({ids_sql}) AS found_rows"


def table_hydrator(engine: AsyncEngine, table: str, id_column: str = "id"):
    """Hydrator loading one row of ``table`` as a dict, or ``None`` if it is gone."""
    statement = text(f"SELECT * FROM {table} WHERE {id_column} = :id")

    async def hydrate(identifier: Any) -> dict | None:
        async with engine.connect() as conn:
            row = (await conn.execute(statement, {"id": identifier})).mappings().first()
        return dict(row) if row is not None else None

    return hydrate


class CachedQueryRunner:
    """Executes list queries, answering repeated ones from the query cache."""

    def __init__(self, context: CacheContext, engine: AsyncEngine | None = None):
        self.context = context
        self.engine = engine if engine is not None else get_engine()

    async def fetch(self, query: ListQuery) -> QueryResult:
        cache = self.context.query_cache
        scope = cache.new_scope()

        limits = cache.filter_limits(
            scope,
            build_limit_clause(query.limit, query.offset),
            no_found_rows=query.no_found_rows,
        )
        sql = f"{query.ids_sql} {limits}" if limits else query.ids_sql

        async with self.engine.connect() as conn:
            rows = []
            if await cache.filter_ids_request(scope, normalize_query(sql, query.params)):
                rows = (await conn.execute(text(sql), query.params)).mappings().all()

            items = await cache.filter_results(scope, rows)

            found = len(items)
            if scope.count_applicable:
                count_sql = cache.filter_found_rows_query(
                    scope, query.count_sql or default_count_sql(query.ids_sql)
                )
                if count_sql:
                    found = (await conn.execute(text(count_sql), query.params)).scalar_one()
                found = await cache.filter_found_rows(scope, found)

        logger.debug(
            "Fetched {} items (found {}, cached {})",
            len(items),
            found,
            scope.is_hit,
        )
        return QueryResult(items=items, found=found, from_cache=scope.is_hit)
