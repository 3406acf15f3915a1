"""Loguru setup for querycache.

Library modules only bind loggers through :func:`get_logger`; the host
application decides where records go by calling :func:`configure_logging`
once at startup. Hits and misses log at DEBUG, generation advances at INFO.
"""

import os
import sys
from typing import Any, Optional

from loguru import logger


LOG_LEVEL = os.getenv("QUERYCACHE_LOG_LEVEL", "INFO")

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{message}"
)


def configure_logging(level: Optional[str] = None, sink: Any = sys.stderr) -> int:
    """Replace Loguru's handlers with one cache-layer sink; returns its handler id."""
    logger.remove()
    return logger.add(
        sink,
        level=level or LOG_LEVEL,
        format=LOG_FORMAT,
        backtrace=False,
        diagnose=False,
    )


def get_logger(name: Optional[str] = None, **kwargs):
    """Bind a logger to a module name and extra context such as ``tenant``."""
    if name:
        return logger.bind(module=name, **kwargs)
    return logger.bind(**kwargs)
