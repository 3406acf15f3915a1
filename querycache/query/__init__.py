"""Host query engine running split list queries through the cache."""

from .models import ListQuery, QueryResult
from .runner import CachedQueryRunner, build_limit_clause, table_hydrator

__all__ = [
    "CachedQueryRunner",
    "ListQuery",
    "QueryResult",
    "build_limit_clause",
    "table_hydrator",
]
