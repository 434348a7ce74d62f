# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides mock LLM clients, a deterministic fake embedder, and settings
pointing at temp directories. No network access, no model downloads.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from readlearn.config.settings import Settings, load_settings
from readlearn.llm.models import LLMResponse
from tests.fakes import CEFR_PAYLOAD, HAIKU, FakeEmbedder, make_llm_response


# === FIXTURES: LLM ===


@pytest.fixture
def mock_llm_response() -> LLMResponse:
    """Standard mock CEFR classification response."""
    return make_llm_response(CEFR_PAYLOAD)


@pytest.fixture
def mock_llm_client(mock_llm_response: LLMResponse) -> AsyncMock:
    """Mock BaseLLMClient returning a valid classification."""
    client = AsyncMock()
    client.complete = AsyncMock(return_value=mock_llm_response)
    client.provider_name = "anthropic"
    client.model_name = HAIKU
    return client


# === FIXTURES: Embeddings ===


@pytest.fixture
def fake_embedder() -> FakeEmbedder:
    return FakeEmbedder()


# === FIXTURES: Settings ===


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings with in-memory cache, SQLite similarity index and analytics on."""
    return load_settings(
        _env_file=None,
        anthropic_api_key="test-key",
        cache_backend="memory",
        cache_db_path=tmp_path / "cache.db",
        similarity_backend="sqlite",
        analytics_enabled=True,
        log_format="text",
    )
