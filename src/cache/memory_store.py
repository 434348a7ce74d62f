# src/cache/memory_store.py — v1
"""In-process exact-match cache (CACHE_BACKEND=memory).

Entries live in a dict and are lost on restart. Each method mutates the
dict without awaiting, so on a single event loop every operation is atomic.
"""

from __future__ import annotations

from readlearn.cache.base_cache_store import BaseAnalysisCache
from readlearn.core.models import AnalysisCacheEntry, CacheStats, utcnow


class MemoryAnalysisCache(BaseAnalysisCache):
    """Dict-backed cache, used for development and tests."""

    def __init__(self) -> None:
        self._entries: dict[str, AnalysisCacheEntry] = {}

    async def get(self, text_hash: str) -> AnalysisCacheEntry | None:
        entry = self._entries.get(text_hash)
        return entry.model_copy(deep=True) if entry is not None else None

    async def touch(self, text_hash: str) -> AnalysisCacheEntry | None:
        entry = self._entries.get(text_hash)
        if entry is None:
            return None
        entry.hit_count += 1
        entry.last_accessed = utcnow()
        return entry.model_copy(deep=True)

    async def upsert(self, entry: AnalysisCacheEntry) -> None:
        existing = self._entries.get(entry.text_hash)
        if existing is not None:
            existing.hit_count += 1
            existing.last_accessed = entry.last_accessed
            return
        self._entries[entry.text_hash] = entry.model_copy(
            update={"hit_count": 1}, deep=True
        )

    async def stats(self) -> CacheStats:
        return CacheStats(
            total_entries=len(self._entries),
            total_hits=sum(e.hit_count for e in self._entries.values()),
        )
