# src/rag/vector_store/base_vector_store.py — v2
"""Abstract similarity index over article embeddings.

One entry per source URL. The index is read-oriented: ``find_similar``
never mutates, and the resolver bumps access counters explicitly through
``touch`` when it uses a match.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from readlearn.core.models import ArticleEmbeddingEntry, SimilarArticle


class BaseSimilarityIndex(ABC):
    """Unified interface for similarity index backends."""

    @abstractmethod
    async def find_similar(
        self,
        embedding: list[float] | None,
        threshold: float = 0.90,
        limit: int = 1,
    ) -> list[SimilarArticle]:
        """Nearest neighbours by cosine similarity.

        Only entries with similarity strictly greater than ``threshold`` are
        returned, best first, at most ``limit`` of them. A None embedding,
        an empty index, or a backend failure yield an empty list.
        """

    @abstractmethod
    async def upsert(self, entry: ArticleEmbeddingEntry) -> None:
        """Insert, or replace embedding/level/word count/preview for an existing URL.

        access_count and created_at of an existing URL are preserved.
        """

    @abstractmethod
    async def touch(self, url: str) -> None:
        """Increment access_count and refresh last_accessed for ``url``."""

    @abstractmethod
    async def get(self, url: str) -> ArticleEmbeddingEntry | None:
        """Fetch the entry for ``url``."""

    @abstractmethod
    async def count(self) -> int:
        """Number of indexed URLs."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (sqlite, chromadb)."""

    def close(self) -> None:  # noqa: B027
        """Release backend resources (no-op by default)."""
