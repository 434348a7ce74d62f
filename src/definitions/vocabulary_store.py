# src/definitions/vocabulary_store.py — v1
"""Vocabulary cache: one definition per (word, language).

Keys are lower-cased words. First write wins; later writes for the same
key are ignored.
"""

from __future__ import annotations

import logging
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path

from readlearn.config.settings import Settings
from readlearn.core.models import WordDefinition

logger = logging.getLogger(__name__)


class BaseVocabularyStore(ABC):
    """Unified interface for vocabulary cache backends."""

    @abstractmethod
    async def get(self, word: str, language: str) -> WordDefinition | None:
        """Look up a cached definition."""

    @abstractmethod
    async def put(self, definition: WordDefinition) -> None:
        """Store a definition unless one already exists for the key."""

    @abstractmethod
    async def count(self) -> int:
        """Number of cached definitions."""

    def close(self) -> None:
        """Release backend resources."""


class MemoryVocabularyStore(BaseVocabularyStore):
    """Dict-backed vocabulary cache."""

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], WordDefinition] = {}

    async def get(self, word: str, language: str) -> WordDefinition | None:
        entry = self._entries.get((word.lower(), language))
        return entry.model_copy() if entry is not None else None

    async def put(self, definition: WordDefinition) -> None:
        key = (definition.word.lower(), definition.language)
        self._entries.setdefault(key, definition.model_copy(update={"word": key[0]}))

    async def count(self) -> int:
        return len(self._entries)


_SCHEMA = """
CREATE TABLE IF NOT EXISTS vocabulary_cache (
    word TEXT NOT NULL,
    language TEXT NOT NULL,
    definition TEXT NOT NULL,
    translation TEXT,
    cefr_level TEXT,
    word_type TEXT,
    PRIMARY KEY (word, language)
);
"""


class SqliteVocabularyStore(BaseVocabularyStore):
    """SQLite-backed vocabulary cache (``vocabulary_cache`` table)."""

    def __init__(self, db_path: Path | str) -> None:
        db_path = str(db_path)
        if db_path != ":memory:":
            path = Path(db_path).expanduser()
            path.parent.mkdir(parents=True, exist_ok=True)
            db_path = str(path)
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)

    async def get(self, word: str, language: str) -> WordDefinition | None:
        row = self._conn.execute(
            """SELECT word, language, definition, translation, cefr_level, word_type
               FROM vocabulary_cache WHERE word = ? AND language = ?""",
            (word.lower(), language),
        ).fetchone()
        if row is None:
            return None
        return WordDefinition(
            word=row["word"],
            language=row["language"],
            definition=row["definition"],
            translation=row["translation"] or "",
            cefr=row["cefr_level"],
            type=row["word_type"] or "unknown",
        )

    async def put(self, definition: WordDefinition) -> None:
        with self._conn:
            self._conn.execute(
                """INSERT INTO vocabulary_cache
                   (word, language, definition, translation, cefr_level, word_type)
                   VALUES (?, ?, ?, ?, ?, ?)
                   ON CONFLICT (word, language) DO NOTHING""",
                (
                    definition.word.lower(),
                    definition.language,
                    definition.definition,
                    definition.translation,
                    definition.cefr,
                    definition.type,
                ),
            )

    async def count(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM vocabulary_cache").fetchone()[0]

    def close(self) -> None:
        self._conn.close()


def create_vocabulary_store(settings: Settings | None = None) -> BaseVocabularyStore:
    """SQLite when the exact cache uses SQLite, memory otherwise."""
    if settings is not None and settings.cache_backend == "sqlite":
        return SqliteVocabularyStore(settings.cache_db_path)
    return MemoryVocabularyStore()
