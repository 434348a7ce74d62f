# src/rag/embeddings/sentence_tf_embedder.py — v2
"""Sentence Transformers embedding adapter (local inference).

Uses the sentence-transformers library for local embedding generation.
Default model is multilingual (intfloat/multilingual-e5-base, 768 dims) so
articles in any supported language share one vector space.
"""

from __future__ import annotations

import logging

from readlearn.rag.embeddings.base_embedder import BaseEmbedder

logger = logging.getLogger(__name__)


class SentenceTransformerEmbedder(BaseEmbedder):
    """Local embeddings via sentence-transformers."""

    def __init__(
        self,
        model: str = "intfloat/multilingual-e5-base",
        dimensions: int = 768,
    ) -> None:
        self._model_name = model
        self._dimensions = dimensions
        self._model = None

    def load(self) -> None:
        """Load the model weights (blocking)."""
        if self._model is not None:
            return
        try:
            from sentence_transformers import SentenceTransformer
        except ImportError as e:
            raise ImportError(
                "sentence-transformers package required: "
                "pip install sentence-transformers"
            ) from e
        logger.info("Loading embedding model %s", self._model_name)
        self._model = SentenceTransformer(self._model_name)
        # Update dimensions from loaded model
        self._dimensions = self._model.get_sentence_embedding_dimension()

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Embed texts locally."""
        if self._model is None:
            raise RuntimeError("Embedding model not loaded; call load() first")
        embeddings = self._model.encode(
            texts, show_progress_bar=False, normalize_embeddings=True
        )
        return [emb.tolist() for emb in embeddings]

    def embed_query(self, query: str) -> list[float]:
        """Embed a single text locally."""
        return self.embed_texts([query])[0]

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def provider_name(self) -> str:
        return "sentence_transformers"

    @property
    def model_name(self) -> str:
        return self._model_name
