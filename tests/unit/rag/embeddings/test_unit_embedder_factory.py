# tests/unit/rag/embeddings/test_unit_embedder_factory.py — v1
"""Tests for rag/embeddings/embedder_factory.py."""

from __future__ import annotations

import pytest

from readlearn.config.settings import load_settings
from readlearn.rag.embeddings.embedder_factory import (
    UnsupportedEmbeddingProviderError,
    create_embedder,
    create_embedding_service,
)
from readlearn.rag.embeddings.embedding_service import EmbedderState
from readlearn.rag.embeddings.sentence_tf_embedder import SentenceTransformerEmbedder


class TestEmbedderFactory:
    def test_default(self):
        assert isinstance(create_embedder(), SentenceTransformerEmbedder)

    def test_from_settings(self):
        s = load_settings(
            _env_file=None,
            embedding_model="sentence-transformers/paraphrase-multilingual-MiniLM-L12-v2",
            embedding_dimensions=384,
        )
        e = create_embedder(s)
        assert e.model_name == "sentence-transformers/paraphrase-multilingual-MiniLM-L12-v2"
        assert e.dimensions == 384

    def test_unknown_provider(self):
        s = load_settings(_env_file=None, embedding_provider="nope")
        with pytest.raises(UnsupportedEmbeddingProviderError, match="nope"):
            create_embedder(s)

    def test_service_is_not_loaded(self):
        s = load_settings(_env_file=None, embedding_max_chars=256)
        service = create_embedding_service(s)
        assert service.state is EmbedderState.UNINITIALIZED
