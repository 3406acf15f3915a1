"""Async SQLAlchemy engine management for the query runner."""

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from querycache.logging_config import get_logger
from querycache.settings import get_settings

logger = get_logger(name=__name__)

_engine: AsyncEngine | None = None


def init_engine(database_url: str | None = None, **engine_kwargs) -> AsyncEngine:
    """Create the global async engine (defaults to the configured database_url)."""
    global _engine
    database_url = database_url or get_settings().database_url
    _engine = create_async_engine(database_url, echo=False, **engine_kwargs)
    logger.info("Async database engine initialized")
    return _engine


def get_engine() -> AsyncEngine:
    """Get the global async engine. Raises if not initialized."""
    if _engine is None:
        raise RuntimeError(
            "Database engine not initialized. Call init_engine() first."
        )
    return _engine


async def dispose_engine() -> None:
    """Dispose the async engine and release all connections."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        logger.info("Async database engine disposed")
    _engine = None
