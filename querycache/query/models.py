"""Request/response models for the cached query runner."""

from typing import Any

from pydantic import BaseModel, Field


class ListQuery(BaseModel):
    """A list query split into an identifier query and a count query.

    ``ids_sql`` selects only the identifier column, ordered as callers
    expect, without any LIMIT/OFFSET. ``count_sql`` defaults to counting
    the rows of ``ids_sql``.
    """

    ids_sql: str
    count_sql: str | None = None
    params: dict[str, Any] = Field(default_factory=dict)
    limit: int | None = Field(default=None, ge=1)
    offset: int = Field(default=0, ge=0)
    no_found_rows: bool = False


class QueryResult(BaseModel):
    items: list[Any]
    found: int
    from_cache: bool = False
