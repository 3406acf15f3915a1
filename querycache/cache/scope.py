"""Per-query state threaded through the host's extension points."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .serialization import Identifier


class FoundCountState(str, Enum):
    UNINITIALIZED = "uninitialized"
    NOT_APPLICABLE = "not_applicable"
    PENDING = "pending"
    CACHED = "cached"


@dataclass
class QueryScope:
    """State of one query between lookup, assembly and count resolution.

    The found-count state is derived rather than stored, so it does not
    matter whether the host applies its row limits before or after the
    identifier lookup.
    """

    fingerprint: Optional[str] = None
    group: Optional[str] = None
    cached_ids: Optional[List[Identifier]] = None
    count_applicable: Optional[bool] = None
    primed: bool = False

    @property
    def looked_up(self) -> bool:
        return self.fingerprint is not None

    @property
    def is_hit(self) -> bool:
        return self.cached_ids is not None

    @property
    def found_state(self) -> FoundCountState:
        if self.count_applicable is False:
            return FoundCountState.NOT_APPLICABLE
        if self.is_hit:
            return FoundCountState.CACHED
        if self.looked_up:
            return FoundCountState.PENDING
        return FoundCountState.UNINITIALIZED

    @property
    def cached_count(self) -> Optional[int]:
        """Found-count served on a hit: the length of the cached identifier list."""
        if not self.is_hit:
            return None
        return len(self.cached_ids)
