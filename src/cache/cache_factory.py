# src/cache/cache_factory.py — v3
"""Factory for exact-match cache instantiation."""

from __future__ import annotations

from readlearn.cache.base_cache_store import BaseAnalysisCache
from readlearn.config.settings import Settings


def create_cache_store(settings: Settings | None = None) -> BaseAnalysisCache:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to the in-memory backend.

    Returns:
        Configured BaseAnalysisCache implementation.
    """
    backend = "memory" if settings is None else settings.cache_backend

    if backend == "memory":
        from readlearn.cache.memory_store import MemoryAnalysisCache
        return MemoryAnalysisCache()

    if backend == "sqlite":
        from readlearn.cache.sqlite_store import SqliteAnalysisCache
        return SqliteAnalysisCache(db_path=settings.cache_db_path)

    if backend == "redis":
        from readlearn.cache.redis_store import RedisAnalysisCache
        if not settings.cache_redis_url:
            raise ValueError(
                "CACHE_REDIS_URL must be set when CACHE_BACKEND=redis"
            )
        return RedisAnalysisCache(redis_url=settings.cache_redis_url)

    raise ValueError(f"Unsupported cache backend: {backend!r}")
