# src/rag/embeddings/base_embedder.py — v2
"""Abstract embeddings interface."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseEmbedder(ABC):
    """Unified interface for embedding providers.

    ``load`` is blocking and may be slow (model download, weights on disk);
    callers run it off the event loop. ``embed_query`` and ``embed_texts``
    require a loaded model.
    """

    @abstractmethod
    def load(self) -> None:
        """Load model weights. Raises on failure."""

    @abstractmethod
    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Embed a batch of texts into L2-normalized vectors."""

    @abstractmethod
    def embed_query(self, query: str) -> list[float]:
        """Embed a single text into an L2-normalized vector."""

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Output vector dimensions."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model identifier."""
