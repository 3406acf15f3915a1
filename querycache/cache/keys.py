"""Cache key construction.

Convention: {key_prefix}:{tenant}:{group}:{key}

Examples:
    cache:main:query_cache_1718000000:9e107d9d372bb6826bd81d3542a419d6
    cache:main:cache_incrementors:query_cache
"""

import hashlib

import orjson

def fingerprint(normalized_query: str) -> str:
    """md5 hex digest of the exact normalized query text.

    No semantic normalization happens here: two queries that differ only in
    whitespace or literal formatting get different fingerprints.
    """
    return hashlib.md5(normalized_query.encode("utf-8")).hexdigest()


def group_name(prefix: str, generation: int) -> str:
    """Active cache group for a generation, e.g. ``query_cache_42``."""
    return f"{prefix}{generation}"


def tenant_group(tenant_id: str, group: str) -> str:
    """Qualify a group with its tenant so tenants never share entries."""
    return f"{tenant_id}:{group}"


def build_store_key(key_prefix: str, group: str, key: str) -> str:
    """Build the Redis key for ``key`` inside a (tenant-qualified) group."""
    return f"{key_prefix}:{group}:{key}"


def normalize_query(sql: str, params: dict | None = None) -> str:
    """Literal SQL plus its bound parameters, serialized deterministically.

    Bound values never appear in the SQL text, so they are appended to keep
    statements with different parameters apart.
    """
    if not params:
        return sql
    encoded = orjson.dumps(_normalize(params), option=orjson.OPT_SORT_KEYS)
    return f"{sql}\n-- params: {encoded.decode('utf-8')}"


def _normalize(obj):
    """Normalize bound parameters for deterministic hashing."""
    from datetime import date, datetime

    from pydantic import BaseModel

    if isinstance(obj, (str, int, float, bool, type(None))):
        return obj
    elif isinstance(obj, (date, datetime)):
        return obj.isoformat()
    elif isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    elif isinstance(obj, dict):
        return {str(k): _normalize(v) for k, v in sorted(obj.items(), key=lambda kv: str(kv[0]))}
    elif isinstance(obj, (list, tuple)):
        return [_normalize(item) for item in obj]
    else:
        return str(obj)
