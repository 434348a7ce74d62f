# src/rag/embeddings/embedding_service.py — v1
"""Process-wide embedding service with single-flight model loading.

Constructed once at startup and injected into the resolver. The first
``embed`` call (or ``warm_up``) starts exactly one model load in a worker
thread; concurrent callers await that same task. After a successful load
the model is immutable shared state and embedding calls need no locking.

A failed load disables the service for the rest of the process: every
later call returns None immediately instead of retrying. Callers treat
None as "similarity tier unavailable", never as an error.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

from readlearn.rag.embeddings.base_embedder import BaseEmbedder

logger = logging.getLogger(__name__)


class EmbedderState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    DISABLED = "disabled"


class EmbeddingService:
    """Lazily loads an embedder once and serves bounded-input embeddings."""

    def __init__(self, embedder: BaseEmbedder, max_chars: int = 512) -> None:
        self._embedder = embedder
        self._max_chars = max_chars
        self._state = EmbedderState.UNINITIALIZED
        self._load_task: asyncio.Future[bool] | None = None

    @property
    def state(self) -> EmbedderState:
        return self._state

    @property
    def available(self) -> bool:
        """True once the model is loaded and usable."""
        return self._state is EmbedderState.READY

    @property
    def model_name(self) -> str:
        return self._embedder.model_name

    async def warm_up(self) -> bool:
        """Load the model ahead of the first request.

        Returns:
            Whether the service is usable.
        """
        return await self._ensure_loaded()

    async def embed(self, text: str) -> list[float] | None:
        """Embed ``text`` truncated to the model input bound.

        Returns:
            The normalized embedding, or None when the service is disabled
            or this particular computation failed.
        """
        if not await self._ensure_loaded():
            return None

        bounded = text[: self._max_chars]
        try:
            return await asyncio.to_thread(self._embedder.embed_query, bounded)
        except Exception as exc:
            logger.warning("Embedding computation failed: %s", exc)
            return None

    async def _ensure_loaded(self) -> bool:
        if self._state is EmbedderState.READY:
            return True
        if self._state is EmbedderState.DISABLED:
            return False
        if self._load_task is None:
            self._state = EmbedderState.LOADING
            self._load_task = asyncio.ensure_future(self._load())
        # shield: a cancelled waiter must not cancel the shared load
        return await asyncio.shield(self._load_task)

    async def _load(self) -> bool:
        logger.info("Loading embedding model %s (one-time)", self._embedder.model_name)
        try:
            await asyncio.to_thread(self._embedder.load)
        except Exception as exc:
            logger.error(
                "Failed to load embedding model %s, similarity search disabled: %s",
                self._embedder.model_name, exc,
            )
            self._state = EmbedderState.DISABLED
            return False
        self._state = EmbedderState.READY
        logger.info("Embedding model %s loaded", self._embedder.model_name)
        return True
