# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field, field_validator

CefrLevel = Literal["A1", "A2", "B1", "B2", "C1", "C2"]

CEFR_LEVELS: tuple[str, ...] = ("A1", "A2", "B1", "B2", "C1", "C2")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# === SAMPLING ===


class Sample(BaseModel):
    """Bounded view of an input text.

    The sample text, never the raw input, is what gets hashed and embedded.
    """

    text: str
    original_word_count: int
    sampled_word_count: int
    sampled: bool = False


# === CLASSIFICATION ===


class ClassificationResult(BaseModel):
    """CEFR assessment of a text, as produced by the remote classifier."""

    cefr_level: CefrLevel
    confidence: str = "medium"
    vocabulary_examples: list[str] = Field(default_factory=list)
    grammar_features: list[str] = Field(default_factory=list)
    reasoning: str = ""

    @field_validator("cefr_level", mode="before")
    @classmethod
    def normalize_level(cls, v: object) -> object:  # noqa: N805
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("confidence", mode="before")
    @classmethod
    def normalize_confidence(cls, v: object) -> object:  # noqa: N805
        if v is None:
            return "medium"
        return str(v).strip().lower()

    @field_validator("vocabulary_examples", "grammar_features", mode="before")
    @classmethod
    def coerce_string_list(cls, v: object) -> object:  # noqa: N805
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        if isinstance(v, list):
            return [str(item) for item in v]
        return v

    @field_validator("reasoning", mode="before")
    @classmethod
    def coerce_reasoning(cls, v: object) -> object:  # noqa: N805
        return "" if v is None else str(v)


class AnalysisResponse(ClassificationResult):
    """Result returned to callers of the resolver, tagged with its origin."""

    language: str
    cached: bool
    hit_count: int | None = None
    cache_type: Literal["exact", "vector_similarity"] | None = None
    similar_url: str | None = None
    similarity_score: float | None = None

    def to_public_dict(self) -> dict:
        """Serialize for the HTTP layer, omitting tier fields that do not apply."""
        return self.model_dump(exclude_none=True)


# === CACHE ENTRIES ===


class AnalysisCacheEntry(BaseModel):
    """Exact-match cache record keyed by the content hash of a sample."""

    text_hash: str
    url: str | None = None
    language: str
    cefr_level: CefrLevel
    confidence: str = "medium"
    vocabulary_examples: list[str] = Field(default_factory=list)
    grammar_features: list[str] = Field(default_factory=list)
    reasoning: str = ""
    word_count: int = 0
    hit_count: int = 1
    created_at: datetime = Field(default_factory=utcnow)
    last_accessed: datetime = Field(default_factory=utcnow)

    def to_result(self) -> ClassificationResult:
        return ClassificationResult(
            cefr_level=self.cefr_level,
            confidence=self.confidence,
            vocabulary_examples=self.vocabulary_examples,
            grammar_features=self.grammar_features,
            reasoning=self.reasoning,
        )


class ArticleEmbeddingEntry(BaseModel):
    """Similarity-index record, one per source URL."""

    url: str
    url_hash: str
    text_preview: str
    embedding: list[float]
    cefr_level: CefrLevel
    language: str
    word_count: int = 0
    access_count: int = 1
    created_at: datetime = Field(default_factory=utcnow)
    last_accessed: datetime = Field(default_factory=utcnow)


class SimilarArticle(BaseModel):
    """A similarity-index hit: the stored entry plus its similarity score."""

    entry: ArticleEmbeddingEntry
    similarity: float

    @property
    def url(self) -> str:
        return self.entry.url


class CacheStats(BaseModel):
    """Aggregate counters of the exact-match cache."""

    total_entries: int = 0
    total_hits: int = 0


# === DEFINITIONS ===


class WordDefinition(BaseModel):
    """Definition of a single word, from the vocabulary cache or the LLM."""

    word: str
    language: str
    definition: str
    translation: str = ""
    cefr: str | None = None
    type: str = "unknown"
    source: Literal["cache", "dictionary", "ai"] = "ai"
    cached: bool = False
