# tests/unit/rag/embeddings/test_unit_embedding_service.py — v1
"""Tests for rag/embeddings/embedding_service.py — single-flight lazy load."""

from __future__ import annotations

import asyncio

import pytest

from readlearn.rag.embeddings.embedding_service import EmbedderState, EmbeddingService
from tests.fakes import FakeEmbedder


class TestEmbeddingService:

    @pytest.mark.asyncio
    async def test_lazy_load_on_first_embed(self):
        embedder = FakeEmbedder()
        service = EmbeddingService(embedder)
        assert service.state is EmbedderState.UNINITIALIZED
        assert embedder.load_calls == 0

        vec = await service.embed("bonjour tout le monde")
        assert vec is not None
        assert len(vec) == embedder.dimensions
        assert service.state is EmbedderState.READY
        assert service.available is True
        assert embedder.load_calls == 1

    @pytest.mark.asyncio
    async def test_concurrent_first_calls_load_once(self):
        embedder = FakeEmbedder(load_delay_s=0.05)
        service = EmbeddingService(embedder)

        results = await asyncio.gather(
            *(service.embed(f"texte numéro {i}") for i in range(10))
        )
        assert all(r is not None for r in results)
        assert embedder.load_calls == 1

    @pytest.mark.asyncio
    async def test_load_failure_disables_permanently(self):
        embedder = FakeEmbedder(fail_load=True)
        service = EmbeddingService(embedder)

        assert await service.embed("premier") is None
        assert service.state is EmbedderState.DISABLED
        assert await service.embed("second") is None
        assert await service.warm_up() is False
        assert embedder.load_calls == 1
        assert embedder.embed_calls == 0

    @pytest.mark.asyncio
    async def test_concurrent_calls_during_failed_load(self):
        embedder = FakeEmbedder(fail_load=True, load_delay_s=0.05)
        service = EmbeddingService(embedder)
        results = await asyncio.gather(*(service.embed("x") for _ in range(5)))
        assert results == [None] * 5
        assert embedder.load_calls == 1

    @pytest.mark.asyncio
    async def test_encode_failure_returns_none_and_stays_ready(self):
        embedder = FakeEmbedder()
        service = EmbeddingService(embedder)
        await service.warm_up()

        embedder.fail_embed = True
        assert await service.embed("échec") is None
        assert service.state is EmbedderState.READY

        embedder.fail_embed = False
        assert await service.embed("succès") is not None

    @pytest.mark.asyncio
    async def test_input_truncated(self):
        embedder = FakeEmbedder()
        service = EmbeddingService(embedder, max_chars=11)
        long_vec = await service.embed("alpha beta gamma delta epsilon")
        short_vec = await service.embed("alpha beta ")
        assert long_vec == short_vec

    @pytest.mark.asyncio
    async def test_warm_up(self):
        embedder = FakeEmbedder()
        service = EmbeddingService(embedder)
        assert await service.warm_up() is True
        assert await service.warm_up() is True
        assert embedder.load_calls == 1
        assert service.model_name == "fake-bow"

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_load(self):
        embedder = FakeEmbedder(load_delay_s=0.1)
        service = EmbeddingService(embedder)

        waiter = asyncio.ensure_future(service.embed("premier"))
        await asyncio.sleep(0.01)
        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter

        assert await service.embed("second") is not None
        assert embedder.load_calls == 1
