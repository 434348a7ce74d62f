# src/rag/vector_store/sqlite_store.py — v1
"""SQLite similarity index (SIMILARITY_BACKEND=sqlite).

Embeddings are stored as JSON arrays; similarity is a brute-force numpy
scan. Adequate for the tens of thousands of pages a single deployment
sees; switch to the ChromaDB backend beyond that.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from readlearn.core.models import ArticleEmbeddingEntry, SimilarArticle, utcnow
from readlearn.core.similarity import cosine_similarities
from readlearn.rag.vector_store.base_vector_store import BaseSimilarityIndex

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS article_embeddings (
    url TEXT PRIMARY KEY,
    url_hash TEXT NOT NULL,
    text_preview TEXT,
    embedding TEXT NOT NULL,
    cefr_level TEXT NOT NULL,
    language TEXT NOT NULL,
    word_count INTEGER NOT NULL DEFAULT 0,
    access_count INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL,
    last_accessed TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_article_embeddings_url_hash ON article_embeddings(url_hash);
"""

_COLUMNS = (
    "url, url_hash, text_preview, embedding, cefr_level, language, "
    "word_count, access_count, created_at, last_accessed"
)


class SqliteSimilarityIndex(BaseSimilarityIndex):
    """Similarity index persisted in SQLite, scored with numpy."""

    def __init__(self, db_path: Path | str) -> None:
        db_path = str(db_path)
        if db_path != ":memory:":
            path = Path(db_path).expanduser()
            path.parent.mkdir(parents=True, exist_ok=True)
            db_path = str(path)
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        if db_path != ":memory:":
            self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def find_similar(
        self,
        embedding: list[float] | None,
        threshold: float = 0.90,
        limit: int = 1,
    ) -> list[SimilarArticle]:
        """Brute-force cosine scan over all stored embeddings."""
        if not embedding or limit < 1:
            return []
        try:
            rows = self._conn.execute(
                f"SELECT {_COLUMNS} FROM article_embeddings"
            ).fetchall()
            if not rows:
                return []
            vectors = [json.loads(row["embedding"]) for row in rows]
            scores = cosine_similarities(embedding, vectors)
            matches = [i for i, score in enumerate(scores) if float(score) > threshold]
            matches.sort(key=lambda i: float(scores[i]), reverse=True)
            return [
                SimilarArticle(
                    entry=_row_to_entry(rows[i], vectors[i]),
                    similarity=float(scores[i]),
                )
                for i in matches[:limit]
            ]
        except Exception as e:
            logger.error("Similarity search failed: %s", e)
            return []

    async def upsert(self, entry: ArticleEmbeddingEntry) -> None:
        """Insert, or replace the article payload keeping URL identity."""
        with self._conn:
            self._conn.execute(
                f"""INSERT INTO article_embeddings ({_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?, 1, ?, ?)
                    ON CONFLICT(url) DO UPDATE SET
                        text_preview = excluded.text_preview,
                        embedding = excluded.embedding,
                        cefr_level = excluded.cefr_level,
                        language = excluded.language,
                        word_count = excluded.word_count,
                        last_accessed = excluded.last_accessed""",
                (
                    entry.url,
                    entry.url_hash,
                    entry.text_preview,
                    json.dumps(entry.embedding),
                    entry.cefr_level,
                    entry.language,
                    entry.word_count,
                    entry.created_at.isoformat(),
                    entry.last_accessed.isoformat(),
                ),
            )

    async def touch(self, url: str) -> None:
        """Bump access_count and last_accessed in one statement."""
        with self._conn:
            self._conn.execute(
                """UPDATE article_embeddings
                   SET access_count = access_count + 1, last_accessed = ?
                   WHERE url = ?""",
                (utcnow().isoformat(), url),
            )

    async def get(self, url: str) -> ArticleEmbeddingEntry | None:
        row = self._conn.execute(
            f"SELECT {_COLUMNS} FROM article_embeddings WHERE url = ?", (url,)
        ).fetchone()
        if row is None:
            return None
        return _row_to_entry(row, json.loads(row["embedding"]))

    async def count(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM article_embeddings").fetchone()[0]

    @property
    def provider_name(self) -> str:
        return "sqlite"

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()


def _row_to_entry(row: sqlite3.Row, embedding: list[float]) -> ArticleEmbeddingEntry:
    return ArticleEmbeddingEntry(
        url=row["url"],
        url_hash=row["url_hash"],
        text_preview=row["text_preview"] or "",
        embedding=embedding,
        cefr_level=row["cefr_level"],
        language=row["language"],
        word_count=row["word_count"],
        access_count=row["access_count"],
        created_at=datetime.fromisoformat(row["created_at"]),
        last_accessed=datetime.fromisoformat(row["last_accessed"]),
    )
