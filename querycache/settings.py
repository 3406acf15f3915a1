"""Settings for the query cache layer.

Values come from ``QUERYCACHE_*`` environment variables or an optional
``.env`` file in the working directory. Every field has a default so the
layer can be embedded without configuration.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Cache layer settings."""

    model_config = SettingsConfigDict(
        env_prefix="QUERYCACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Connections ===
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for the cache store",
    )
    database_url: str = Field(
        default="sqlite+aiosqlite:///:memory:",
        description="Async SQLAlchemy URL used by the query runner",
    )

    # === Cache groups ===
    key_prefix: str = Field(
        default="cache",
        description="Prefix of every Redis key written by the store",
    )
    group_prefix: str = Field(
        default="query_cache_",
        description="Prefix of the versioned cache group (prefix + generation)",
    )
    incrementor_key: str = Field(
        default="query_cache",
        description="Key holding the generation counter",
    )
    incrementor_group: str = Field(
        default="cache_incrementors",
        description="Unversioned group holding the generation counter",
    )
    generation_max_length: int = Field(
        default=10,
        description="Reset the generation to 0 once its decimal form is longer than this",
        ge=1,
    )
    entry_ttl_seconds: int = Field(
        default=86400,
        description="TTL of cached identifier lists (safety net; invalidation is by generation)",
        ge=1,
    )
    reload_generation_per_query: bool = Field(
        default=True,
        description="Re-read the generation before each lookup to see advances from other processes",
    )

    # === Result assembly ===
    id_field: str = Field(
        default="id",
        description="Column/attribute holding the object identifier in raw result rows",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
