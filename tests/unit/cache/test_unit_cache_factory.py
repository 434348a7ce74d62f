# tests/unit/cache/test_unit_cache_factory.py — v1
"""Tests for cache/cache_factory.py."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from readlearn.cache.cache_factory import create_cache_store
from readlearn.cache.memory_store import MemoryAnalysisCache
from readlearn.cache.sqlite_store import SqliteAnalysisCache
from readlearn.config.settings import load_settings


class TestCreateCacheStore:
    def test_default_is_memory(self):
        assert isinstance(create_cache_store(), MemoryAnalysisCache)

    def test_memory(self):
        s = load_settings(_env_file=None, cache_backend="memory")
        assert isinstance(create_cache_store(s), MemoryAnalysisCache)

    def test_sqlite(self, tmp_path: Path):
        s = load_settings(_env_file=None, cache_backend="sqlite", cache_db_path=tmp_path / "c.db")
        store = create_cache_store(s)
        assert isinstance(store, SqliteAnalysisCache)
        store.close()
        assert (tmp_path / "c.db").exists()

    def test_redis(self):
        s = load_settings(
            _env_file=None, cache_backend="redis", cache_redis_url="redis://localhost:6379/0"
        )
        with patch("readlearn.cache.redis_store.RedisAnalysisCache.__init__", return_value=None):
            from readlearn.cache.redis_store import RedisAnalysisCache
            assert isinstance(create_cache_store(s), RedisAnalysisCache)

    def test_redis_without_url(self):
        s = load_settings(_env_file=None)
        s.cache_backend = "redis"
        with pytest.raises(ValueError, match="CACHE_REDIS_URL"):
            create_cache_store(s)
