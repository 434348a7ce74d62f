# src/cache/redis_store.py — v2
"""Redis-based exact-match cache (CACHE_BACKEND=redis).

Requires 'redis' package: pip install redis.
Suitable for multi-instance deployments sharing one cache. Insert-or-bump
and hit recording run as Lua scripts so each is atomic on the server.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime

from readlearn.cache.base_cache_store import BaseAnalysisCache
from readlearn.core.models import AnalysisCacheEntry, CacheStats, utcnow

logger = logging.getLogger(__name__)

_KEY_PREFIX = "readlearn:analysis:"
_INDEX_KEY = "readlearn:analysis:__index__"

# KEYS[1]=entry key, KEYS[2]=index key; ARGV[1]=data, ARGV[2]=timestamp, ARGV[3]=hash
_UPSERT_LUA = """
if redis.call('EXISTS', KEYS[1]) == 1 then
    redis.call('HINCRBY', KEYS[1], 'hit_count', 1)
    redis.call('HSET', KEYS[1], 'last_accessed', ARGV[2])
    return 0
end
redis.call('HSET', KEYS[1], 'data', ARGV[1], 'hit_count', 1, 'last_accessed', ARGV[2])
redis.call('SADD', KEYS[2], ARGV[3])
return 1
"""

# KEYS[1]=entry key; ARGV[1]=timestamp. Returns new hit_count, or -1 on miss.
_TOUCH_LUA = """
if redis.call('EXISTS', KEYS[1]) == 0 then
    return -1
end
redis.call('HSET', KEYS[1], 'last_accessed', ARGV[1])
return redis.call('HINCRBY', KEYS[1], 'hit_count', 1)
"""

# Classification and provenance fields stored in the 'data' field.
_DATA_FIELDS = {
    "url", "language", "cefr_level", "confidence", "vocabulary_examples",
    "grammar_features", "reasoning", "word_count", "created_at",
}


class RedisAnalysisCache(BaseAnalysisCache):
    """Redis-backed exact-match cache for distributed deployments."""

    def __init__(self, redis_url: str) -> None:
        try:
            import redis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install redis"
            ) from e

        self._client = redis.Redis.from_url(redis_url, decode_responses=True)
        self._upsert_script = self._client.register_script(_UPSERT_LUA)
        self._touch_script = self._client.register_script(_TOUCH_LUA)

    async def get(self, text_hash: str) -> AnalysisCacheEntry | None:
        """Retrieve cache entry by content hash."""
        fields = self._client.hgetall(f"{_KEY_PREFIX}{text_hash}")
        if not fields or "data" not in fields:
            return None
        try:
            data = json.loads(fields["data"])
            return AnalysisCacheEntry(
                text_hash=text_hash,
                hit_count=int(fields.get("hit_count", 1)),
                last_accessed=datetime.fromisoformat(
                    fields.get("last_accessed", data["created_at"])
                ),
                **data,
            )
        except Exception as e:
            logger.warning("Failed to deserialize cache entry %s: %s", text_hash, e)
            return None

    async def touch(self, text_hash: str) -> AnalysisCacheEntry | None:
        """Atomically bump hit_count and last_accessed."""
        result = self._touch_script(
            keys=[f"{_KEY_PREFIX}{text_hash}"],
            args=[utcnow().isoformat()],
        )
        if int(result) < 0:
            return None
        return await self.get(text_hash)

    async def upsert(self, entry: AnalysisCacheEntry) -> None:
        """Atomically insert, or bump counters if the hash already exists."""
        data = entry.model_dump(mode="json", include=_DATA_FIELDS)
        self._upsert_script(
            keys=[f"{_KEY_PREFIX}{entry.text_hash}", _INDEX_KEY],
            args=[
                json.dumps(data, ensure_ascii=False),
                entry.last_accessed.isoformat(),
                entry.text_hash,
            ],
        )

    async def stats(self) -> CacheStats:
        """Count indexed entries and sum their hit counts."""
        hashes = self._client.smembers(_INDEX_KEY)
        total_hits = 0
        for text_hash in hashes:
            value = self._client.hget(f"{_KEY_PREFIX}{text_hash}", "hit_count")
            if value is not None:
                total_hits += int(value)
        return CacheStats(total_entries=len(hashes), total_hits=total_hits)

    def close(self) -> None:
        """Close the Redis connection."""
        self._client.close()
