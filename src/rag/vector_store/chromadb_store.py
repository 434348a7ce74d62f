# src/rag/vector_store/chromadb_store.py — v2
"""ChromaDB similarity index (SIMILARITY_BACKEND=chromadb).

Uses the chromadb SDK for local or remote vector storage.
Requires: pip install chromadb.
The collection is created in cosine space, so similarity = 1 - distance.
Records are keyed by a case-sensitive hash of the URL; counters live in
record metadata.
"""

from __future__ import annotations

import hashlib
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from readlearn.core.models import ArticleEmbeddingEntry, SimilarArticle, utcnow
from readlearn.rag.vector_store.base_vector_store import BaseSimilarityIndex

logger = logging.getLogger(__name__)


class ChromaDBSimilarityIndex(BaseSimilarityIndex):
    """Similarity index backed by ChromaDB."""

    def __init__(
        self,
        collection: str = "article_embeddings",
        persist_path: str | Path | None = None,
        host: str | None = None,
        port: int = 8000,
    ) -> None:
        try:
            import chromadb
        except ImportError as e:
            raise ImportError(
                "chromadb package required: pip install chromadb"
            ) from e

        if host:
            self._client = chromadb.HttpClient(host=host, port=port)
        elif persist_path:
            self._client = chromadb.PersistentClient(path=str(Path(persist_path).expanduser()))
        else:
            self._client = chromadb.Client()
        self._collection = self._client.get_or_create_collection(
            collection, metadata={"hnsw:space": "cosine"}
        )

    async def find_similar(
        self,
        embedding: list[float] | None,
        threshold: float = 0.90,
        limit: int = 1,
    ) -> list[SimilarArticle]:
        """Query by embedding similarity."""
        if not embedding or limit < 1:
            return []
        try:
            total = self._collection.count()
            if total == 0:
                return []
            results = self._collection.query(
                query_embeddings=[embedding],
                n_results=min(limit, total),
                include=["documents", "metadatas", "distances", "embeddings"],
            )
            matches: list[SimilarArticle] = []
            if not results["ids"] or not results["ids"][0]:
                return matches
            for i in range(len(results["ids"][0])):
                similarity = 1.0 - float(results["distances"][0][i])
                if similarity <= threshold:
                    continue
                entry = _to_entry(
                    results["metadatas"][0][i],
                    results["documents"][0][i],
                    list(results["embeddings"][0][i]),
                )
                matches.append(SimilarArticle(entry=entry, similarity=similarity))
        except Exception as e:
            logger.error("Similarity search failed: %s", e)
            return []

        matches.sort(key=lambda m: m.similarity, reverse=True)
        return matches

    async def upsert(self, entry: ArticleEmbeddingEntry) -> None:
        """Insert or replace the record for entry.url, keeping its counters."""
        existing = await self.get(entry.url)
        metadata = _to_metadata(entry)
        if existing is not None:
            metadata["access_count"] = existing.access_count
            metadata["created_at"] = existing.created_at.isoformat()
        self._collection.upsert(
            ids=[_record_id(entry.url)],
            embeddings=[entry.embedding],
            documents=[entry.text_preview],
            metadatas=[metadata],
        )

    async def touch(self, url: str) -> None:
        """Bump access_count and last_accessed (read-modify-write)."""
        existing = await self.get(url)
        if existing is None:
            return
        metadata = _to_metadata(existing)
        metadata["access_count"] = existing.access_count + 1
        metadata["last_accessed"] = utcnow().isoformat()
        self._collection.update(ids=[_record_id(existing.url)], metadatas=[metadata])

    async def get(self, url: str) -> ArticleEmbeddingEntry | None:
        result = self._collection.get(
            where={"url": url},
            include=["documents", "metadatas", "embeddings"],
        )
        if not result["ids"]:
            return None
        return _to_entry(
            result["metadatas"][0], result["documents"][0], list(result["embeddings"][0])
        )

    async def count(self) -> int:
        return self._collection.count()

    @property
    def provider_name(self) -> str:
        return "chromadb"


def _to_metadata(entry: ArticleEmbeddingEntry) -> dict[str, Any]:
    return {
        "url": entry.url,
        "url_hash": entry.url_hash,
        "cefr_level": entry.cefr_level,
        "language": entry.language,
        "word_count": entry.word_count,
        "access_count": entry.access_count,
        "created_at": entry.created_at.isoformat(),
        "last_accessed": entry.last_accessed.isoformat(),
    }


def _to_entry(
    metadata: dict[str, Any], document: str | None, embedding: list[float]
) -> ArticleEmbeddingEntry:
    return ArticleEmbeddingEntry(
        url=metadata["url"],
        url_hash=metadata["url_hash"],
        text_preview=document or "",
        embedding=[float(x) for x in embedding],
        cefr_level=metadata["cefr_level"],
        language=metadata["language"],
        word_count=int(metadata.get("word_count", 0)),
        access_count=int(metadata.get("access_count", 1)),
        created_at=datetime.fromisoformat(metadata["created_at"]),
        last_accessed=datetime.fromisoformat(metadata["last_accessed"]),
    )


def _record_id(url: str) -> str:
    # url_hash folds case; record ids must not.
    return hashlib.sha256(url.encode("utf-8")).hexdigest()
