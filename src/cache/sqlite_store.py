# src/cache/sqlite_store.py — v2
"""SQLite-based exact-match cache (CACHE_BACKEND=sqlite).

Uses stdlib sqlite3, no external dependency.
Writes are single ``INSERT ... ON CONFLICT DO UPDATE`` / ``UPDATE``
statements, so each hit or insert is atomic at the database level.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from readlearn.cache.base_cache_store import BaseAnalysisCache
from readlearn.core.models import AnalysisCacheEntry, CacheStats, utcnow

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS analyses (
    text_hash TEXT PRIMARY KEY,
    url TEXT,
    language TEXT NOT NULL,
    cefr_level TEXT NOT NULL,
    confidence TEXT,
    vocabulary_examples TEXT NOT NULL DEFAULT '[]',
    grammar_features TEXT NOT NULL DEFAULT '[]',
    reasoning TEXT,
    word_count INTEGER NOT NULL DEFAULT 0,
    hit_count INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL,
    last_accessed TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_analyses_url ON analyses(url);
"""

_COLUMNS = (
    "text_hash, url, language, cefr_level, confidence, vocabulary_examples, "
    "grammar_features, reasoning, word_count, hit_count, created_at, last_accessed"
)


class SqliteAnalysisCache(BaseAnalysisCache):
    """SQLite-backed exact-match cache."""

    def __init__(self, db_path: Path | str) -> None:
        db_path = str(db_path)
        if db_path != ":memory:":
            path = Path(db_path).expanduser()
            path.parent.mkdir(parents=True, exist_ok=True)
            db_path = str(path)
        self._db_path = db_path
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        if db_path != ":memory:":
            self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def get(self, text_hash: str) -> AnalysisCacheEntry | None:
        """Retrieve cache entry by content hash."""
        row = self._conn.execute(
            f"SELECT {_COLUMNS} FROM analyses WHERE text_hash = ?", (text_hash,)
        ).fetchone()
        if row is None:
            return None
        try:
            return _row_to_entry(row)
        except Exception as e:
            logger.warning("Failed to deserialize cache entry %s: %s", text_hash, e)
            return None

    async def touch(self, text_hash: str) -> AnalysisCacheEntry | None:
        """Increment hit_count and refresh last_accessed in one statement."""
        with self._conn:
            cursor = self._conn.execute(
                """UPDATE analyses
                   SET hit_count = hit_count + 1, last_accessed = ?
                   WHERE text_hash = ?""",
                (utcnow().isoformat(), text_hash),
            )
        if cursor.rowcount == 0:
            return None
        return await self.get(text_hash)

    async def upsert(self, entry: AnalysisCacheEntry) -> None:
        """Insert, or bump hit_count/last_accessed on conflict."""
        with self._conn:
            self._conn.execute(
                f"""INSERT INTO analyses ({_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, 1, ?, ?)
                    ON CONFLICT(text_hash) DO UPDATE SET
                        hit_count = analyses.hit_count + 1,
                        last_accessed = excluded.last_accessed""",
                (
                    entry.text_hash,
                    entry.url,
                    entry.language,
                    entry.cefr_level,
                    entry.confidence,
                    json.dumps(entry.vocabulary_examples, ensure_ascii=False),
                    json.dumps(entry.grammar_features, ensure_ascii=False),
                    entry.reasoning,
                    entry.word_count,
                    entry.created_at.isoformat(),
                    entry.last_accessed.isoformat(),
                ),
            )

    async def stats(self) -> CacheStats:
        """Count entries and sum hit counts."""
        row = self._conn.execute(
            "SELECT COUNT(*), COALESCE(SUM(hit_count), 0) FROM analyses"
        ).fetchone()
        return CacheStats(total_entries=row[0], total_hits=row[1])

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()


def _row_to_entry(row: sqlite3.Row) -> AnalysisCacheEntry:
    return AnalysisCacheEntry(
        text_hash=row["text_hash"],
        url=row["url"],
        language=row["language"],
        cefr_level=row["cefr_level"],
        confidence=row["confidence"] or "medium",
        vocabulary_examples=json.loads(row["vocabulary_examples"] or "[]"),
        grammar_features=json.loads(row["grammar_features"] or "[]"),
        reasoning=row["reasoning"] or "",
        word_count=row["word_count"],
        hit_count=row["hit_count"],
        created_at=datetime.fromisoformat(row["created_at"]),
        last_accessed=datetime.fromisoformat(row["last_accessed"]),
    )
