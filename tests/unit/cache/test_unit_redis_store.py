# tests/unit/cache/test_unit_redis_store.py — v1
"""Tests for cache/redis_store.py — in-process fake Redis client."""

from __future__ import annotations

import sys
from unittest.mock import MagicMock, patch

import pytest

from readlearn.core.models import AnalysisCacheEntry


class FakeRedis:
    """Hash/set subset of Redis plus Python stand-ins for the two scripts."""

    def __init__(self) -> None:
        self.hashes: dict[str, dict[str, str]] = {}
        self.sets: dict[str, set[str]] = {}

    def hgetall(self, key):
        return dict(self.hashes.get(key, {}))

    def hget(self, key, field):
        return self.hashes.get(key, {}).get(field)

    def smembers(self, key):
        return set(self.sets.get(key, set()))

    def close(self):
        pass

    def upsert_script(self, keys, args):
        key, index = keys
        data, ts, text_hash = args
        if key in self.hashes:
            self.hashes[key]["hit_count"] = str(int(self.hashes[key]["hit_count"]) + 1)
            self.hashes[key]["last_accessed"] = ts
            return 0
        self.hashes[key] = {"data": data, "hit_count": "1", "last_accessed": ts}
        self.sets.setdefault(index, set()).add(text_hash)
        return 1

    def touch_script(self, keys, args):
        key = keys[0]
        if key not in self.hashes:
            return -1
        self.hashes[key]["last_accessed"] = args[0]
        self.hashes[key]["hit_count"] = str(int(self.hashes[key]["hit_count"]) + 1)
        return int(self.hashes[key]["hit_count"])


def _make_store():
    from readlearn.cache.redis_store import RedisAnalysisCache

    fake = FakeRedis()
    store = RedisAnalysisCache.__new__(RedisAnalysisCache)
    store._client = fake
    store._upsert_script = fake.upsert_script
    store._touch_script = fake.touch_script
    return store, fake


def _entry(text_hash: str = "abc") -> AnalysisCacheEntry:
    return AnalysisCacheEntry(
        text_hash=text_hash, url=None, language="de", cefr_level="A2",
        vocabulary_examples=["Haus"], reasoning="Simple.", word_count=80,
    )


class TestRedisAnalysisCache:
    def test_import_error_without_redis(self):
        """Clear ImportError when redis is not available."""
        redis_mod = sys.modules.get("redis")
        sys.modules["redis"] = None  # type: ignore[assignment]
        try:
            from readlearn.cache.redis_store import RedisAnalysisCache
            with pytest.raises(ImportError, match="redis"):
                RedisAnalysisCache(redis_url="redis://localhost")
        finally:
            if redis_mod is not None:
                sys.modules["redis"] = redis_mod
            else:
                sys.modules.pop("redis", None)

    def test_init_registers_scripts(self):
        pytest.importorskip("redis")
        client = MagicMock()
        with patch("redis.Redis.from_url", return_value=client) as from_url:
            from readlearn.cache.redis_store import RedisAnalysisCache
            RedisAnalysisCache(redis_url="redis://cache:6379/0")
        from_url.assert_called_once_with("redis://cache:6379/0", decode_responses=True)
        assert client.register_script.call_count == 2

    @pytest.mark.asyncio
    async def test_upsert_and_get(self):
        store, _ = _make_store()
        await store.upsert(_entry())
        got = await store.get("abc")
        assert got is not None
        assert got.cefr_level == "A2"
        assert got.language == "de"
        assert got.vocabulary_examples == ["Haus"]
        assert got.hit_count == 1

    @pytest.mark.asyncio
    async def test_upsert_conflict_bumps(self):
        store, _ = _make_store()
        await store.upsert(_entry())
        await store.upsert(_entry())
        assert (await store.get("abc")).hit_count == 2

    @pytest.mark.asyncio
    async def test_touch(self):
        store, _ = _make_store()
        assert await store.touch("abc") is None
        await store.upsert(_entry())
        assert (await store.touch("abc")).hit_count == 2

    @pytest.mark.asyncio
    async def test_corrupt_entry_is_a_miss(self):
        store, fake = _make_store()
        fake.hashes["readlearn:analysis:bad"] = {"data": "{not json", "hit_count": "1"}
        assert await store.get("bad") is None

    @pytest.mark.asyncio
    async def test_stats(self):
        store, _ = _make_store()
        await store.upsert(_entry("a"))
        await store.upsert(_entry("b"))
        await store.touch("b")
        stats = await store.stats()
        assert stats.total_entries == 2
        assert stats.total_hits == 3
