# src/cache/base_cache_store.py — v2
"""Abstract exact-match cache interface.

Every mutation is a single atomic operation against the backing store.
Implementations rely on the store's own conflict resolution (SQL upsert,
Redis script, an await-free critical section in memory) rather than on
application-level locks, so concurrent requests sharing a content hash
never lose an increment.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from readlearn.core.models import AnalysisCacheEntry, CacheStats


class BaseAnalysisCache(ABC):
    """Unified interface for exact-match analysis cache backends."""

    @abstractmethod
    async def get(self, text_hash: str) -> AnalysisCacheEntry | None:
        """Retrieve a cache entry by content hash, without side effects."""

    @abstractmethod
    async def touch(self, text_hash: str) -> AnalysisCacheEntry | None:
        """Record a hit: increment hit_count, refresh last_accessed.

        Returns the updated entry, or None if the hash is not cached.
        """

    @abstractmethod
    async def upsert(self, entry: AnalysisCacheEntry) -> None:
        """Insert ``entry`` with hit_count=1.

        On conflict the stored classification is kept and only hit_count and
        last_accessed are bumped, so racing identical requests are not errors.
        """

    @abstractmethod
    async def stats(self) -> CacheStats:
        """Aggregate entry and hit counts."""

    def close(self) -> None:  # noqa: B027
        """Release backend resources (no-op by default)."""
