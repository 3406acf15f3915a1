"""Decorators for data-mutating code paths.

Usage:
    from querycache.cache import invalidates, count_maintenance

    @invalidates(context.trigger, lambda post: ChangeEvent(object_type="post", object_id=post.id))
    async def save_post(post):
        ...

    @count_maintenance(context.trigger)
    async def update_comment_count(post_id):
        ...
"""

from __future__ import annotations

import functools
from typing import Callable, Optional

from querycache.logging_config import get_logger

from .invalidation import ChangeEvent, InvalidationTrigger

logger = get_logger(name=__name__)


def invalidates(
    trigger: InvalidationTrigger,
    event_builder: Optional[Callable[..., Optional[ChangeEvent]]] = None,
) -> Callable:
    """Decorator that reports a data change after an async mutation succeeds.

    Args:
        trigger: Invalidation trigger of the tenant being written to.
        event_builder: Optional function(*args, **kwargs) -> ChangeEvent
            describing the change (used to skip previews and autosaves).

    Notes:
        - Only works with async functions.
        - Nothing is invalidated when the wrapped function raises.
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            result = await func(*args, **kwargs)
            event = event_builder(*args, **kwargs) if event_builder else None
            await trigger.on_data_changed(event)
            return result

        wrapper._invalidates_cache = True
        return wrapper
    return decorator


def count_maintenance(trigger: InvalidationTrigger) -> Callable:
    """Decorator that suppresses invalidation while bookkeeping runs.

    Change notifications raised by counter updates are side effects, not
    content changes; suppression is released even if the function raises.
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            trigger.begin_count_maintenance()
            try:
                return await func(*args, **kwargs)
            finally:
                trigger.end_count_maintenance()

        wrapper._suppresses_invalidation = True
        return wrapper
    return decorator
