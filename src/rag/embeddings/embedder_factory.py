# src/rag/embeddings/embedder_factory.py — v2
"""Factory: instantiate embedding provider and service from configuration."""

from __future__ import annotations

import importlib
import logging

from readlearn.config.settings import Settings
from readlearn.rag.embeddings.base_embedder import BaseEmbedder
from readlearn.rag.embeddings.embedding_service import EmbeddingService

logger = logging.getLogger(__name__)

_PROVIDER_REGISTRY: dict[str, str] = {
    "sentence_transformers": "readlearn.rag.embeddings.sentence_tf_embedder.SentenceTransformerEmbedder",
}


class UnsupportedEmbeddingProviderError(ValueError):
    """Raised when an embedding provider is not registered."""


def create_embedder(settings: Settings | None = None) -> BaseEmbedder:
    """Instantiate the configured embedding provider.

    Args:
        settings: Application settings. Uses EMBEDDING_PROVIDER and EMBEDDING_MODEL.

    Returns:
        Configured (not yet loaded) BaseEmbedder instance.
    """
    if settings is None:
        from readlearn.rag.embeddings.sentence_tf_embedder import SentenceTransformerEmbedder
        return SentenceTransformerEmbedder()

    provider = settings.embedding_provider
    if provider not in _PROVIDER_REGISTRY:
        raise UnsupportedEmbeddingProviderError(
            f"Unsupported embedding provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    cls = _import_class(_PROVIDER_REGISTRY[provider])
    logger.debug("Creating embedder: provider=%s, model=%s", provider, settings.embedding_model)
    return cls(model=settings.embedding_model, dimensions=settings.embedding_dimensions)


def create_embedding_service(settings: Settings | None = None) -> EmbeddingService:
    """Wrap the configured embedder in a single-flight EmbeddingService."""
    max_chars = 512 if settings is None else settings.embedding_max_chars
    return EmbeddingService(create_embedder(settings), max_chars=max_chars)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
