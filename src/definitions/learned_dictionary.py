# src/definitions/learned_dictionary.py — v1
"""Learned dictionary: definitions the LLM has already produced.

Consulted before the LLM for context-free lookups in the languages listed
in LEARNED_DICTIONARY_LANGUAGES. Every AI definition is learned; a word
learned again keeps its first definition and bumps ``learn_count``.
"""

from __future__ import annotations

import logging
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path

from readlearn.config.settings import Settings
from readlearn.core.models import WordDefinition

logger = logging.getLogger(__name__)


class BaseLearnedDictionary(ABC):
    """Unified interface for learned dictionary backends."""

    @abstractmethod
    async def lookup(self, word: str, language: str) -> WordDefinition | None:
        """Return the learned definition, tagged ``source="dictionary"``."""

    @abstractmethod
    async def learn(self, definition: WordDefinition) -> None:
        """Insert a definition, or bump the learn count of a known word."""

    @abstractmethod
    async def learn_count(self, word: str, language: str) -> int:
        """Times ``word`` was learned (0 when unknown)."""

    @abstractmethod
    async def count(self) -> int:
        """Number of learned words."""

    def close(self) -> None:
        """Release backend resources."""


class MemoryLearnedDictionary(BaseLearnedDictionary):
    """Dict-backed learned dictionary."""

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], WordDefinition] = {}
        self._counts: dict[tuple[str, str], int] = {}

    async def lookup(self, word: str, language: str) -> WordDefinition | None:
        entry = self._entries.get((word.strip().lower(), language))
        return entry.model_copy() if entry is not None else None

    async def learn(self, definition: WordDefinition) -> None:
        key = (definition.word.strip().lower(), definition.language)
        self._entries.setdefault(
            key,
            definition.model_copy(
                update={"word": key[0], "cefr": None, "source": "dictionary", "cached": False}
            ),
        )
        self._counts[key] = self._counts.get(key, 0) + 1

    async def learn_count(self, word: str, language: str) -> int:
        return self._counts.get((word.strip().lower(), language), 0)

    async def count(self) -> int:
        return len(self._entries)


_SCHEMA = """
CREATE TABLE IF NOT EXISTS learned_dictionary (
    word TEXT NOT NULL,
    language TEXT NOT NULL,
    translation TEXT,
    part_of_speech TEXT,
    definition TEXT NOT NULL,
    learn_count INTEGER NOT NULL DEFAULT 1,
    PRIMARY KEY (word, language)
);
"""


class SqliteLearnedDictionary(BaseLearnedDictionary):
    """SQLite-backed learned dictionary (``learned_dictionary`` table)."""

    def __init__(self, db_path: Path | str) -> None:
        db_path = str(db_path)
        if db_path != ":memory:":
            path = Path(db_path).expanduser()
            path.parent.mkdir(parents=True, exist_ok=True)
            db_path = str(path)
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)

    async def lookup(self, word: str, language: str) -> WordDefinition | None:
        row = self._conn.execute(
            """SELECT word, language, translation, part_of_speech, definition
               FROM learned_dictionary WHERE word = ? AND language = ?""",
            (word.strip().lower(), language),
        ).fetchone()
        if row is None:
            return None
        return WordDefinition(
            word=row["word"],
            language=row["language"],
            definition=row["definition"],
            translation=row["translation"] or "",
            type=row["part_of_speech"] or "unknown",
            source="dictionary",
        )

    async def learn(self, definition: WordDefinition) -> None:
        with self._conn:
            self._conn.execute(
                """INSERT INTO learned_dictionary
                   (word, language, translation, part_of_speech, definition)
                   VALUES (?, ?, ?, ?, ?)
                   ON CONFLICT (word, language) DO UPDATE SET
                       learn_count = learned_dictionary.learn_count + 1""",
                (
                    definition.word.strip().lower(),
                    definition.language,
                    definition.translation,
                    definition.type,
                    definition.definition,
                ),
            )

    async def learn_count(self, word: str, language: str) -> int:
        row = self._conn.execute(
            "SELECT learn_count FROM learned_dictionary WHERE word = ? AND language = ?",
            (word.strip().lower(), language),
        ).fetchone()
        return row["learn_count"] if row is not None else 0

    async def count(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM learned_dictionary").fetchone()[0]

    def close(self) -> None:
        self._conn.close()


def create_learned_dictionary(
    settings: Settings | None = None,
) -> BaseLearnedDictionary | None:
    """None when disabled; SQLite when the exact cache uses SQLite; memory otherwise."""
    if settings is None:
        return MemoryLearnedDictionary()
    if not settings.learned_dictionary_enabled:
        logger.info("Learned dictionary disabled")
        return None
    if settings.cache_backend == "sqlite":
        return SqliteLearnedDictionary(settings.cache_db_path)
    return MemoryLearnedDictionary()
