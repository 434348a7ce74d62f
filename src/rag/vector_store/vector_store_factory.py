# src/rag/vector_store/vector_store_factory.py — v2
"""Factory: instantiate the similarity index from configuration."""

from __future__ import annotations

import logging

from readlearn.config.settings import Settings
from readlearn.rag.vector_store.base_vector_store import BaseSimilarityIndex

logger = logging.getLogger(__name__)


class UnsupportedVectorStoreError(ValueError):
    """Raised when a similarity backend is not supported."""


def create_similarity_index(settings: Settings) -> BaseSimilarityIndex | None:
    """Instantiate the configured similarity index.

    Args:
        settings: Application settings (SIMILARITY_BACKEND).

    Returns:
        Configured BaseSimilarityIndex, or None when SIMILARITY_BACKEND=none.

    Raises:
        UnsupportedVectorStoreError: If the backend is not supported.
    """
    if not settings.similarity_enabled:
        logger.info("Similarity tier disabled (SIMILARITY_BACKEND=none)")
        return None

    backend = settings.similarity_backend
    if backend == "sqlite":
        from readlearn.rag.vector_store.sqlite_store import SqliteSimilarityIndex
        return SqliteSimilarityIndex(db_path=settings.cache_db_path)

    if backend == "chromadb":
        from readlearn.rag.vector_store.chromadb_store import ChromaDBSimilarityIndex
        url = settings.vector_db_url
        if url:
            # Remote ChromaDB: parse host:port
            host = url.split("://")[-1].split(":")[0] if "://" in url else url.split(":")[0]
            port = int(url.rsplit(":", 1)[-1]) if ":" in url.rsplit("/", 1)[-1] else 8000
            return ChromaDBSimilarityIndex(
                collection=settings.vector_db_collection, host=host, port=port
            )
        return ChromaDBSimilarityIndex(
            collection=settings.vector_db_collection,
            persist_path=str(settings.vector_db_path),
        )

    raise UnsupportedVectorStoreError(
        f"Unsupported similarity backend: {backend!r}. "
        f"Available: none, sqlite, chromadb"
    )
