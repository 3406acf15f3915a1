"""Cached value serialization using orjson.

Identifier lists are stored as plain JSON arrays of ints/strings. Anything that does not decode to the
expected shape is reported as ``None`` so callers treat it as a miss.
"""

from __future__ import annotations

from typing import Any, List, Optional, Union

import orjson

from querycache.logging_config import get_logger

logger = get_logger(name=__name__)

Identifier = Union[int, str]


def serialize_ids(identifiers: List[Identifier]) -> str:
    """Serialize an ordered identifier list for storage."""
    return orjson.dumps(list(identifiers)).decode("utf-8")


def deserialize_ids(raw: Any) -> Optional[List[Identifier]]:
    """Decode a stored identifier list, or ``None`` if it is malformed."""
    value = _loads(raw)
    if not isinstance(value, list):
        if raw is not None:
            logger.warning("Malformed cached identifier list: {!r}", raw)
        return None
    for item in value:
        if isinstance(item, bool) or not isinstance(item, (int, str)):
            logger.warning("Malformed identifier in cached list: {!r}", item)
            return None
    return value


def _loads(raw: Any) -> Any:
    if raw is None:
        return None
    if isinstance(raw, list):
        return raw
    try:
        return orjson.loads(raw)
    except (orjson.JSONDecodeError, TypeError):
        return None
