# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Server ===
    app_name: str = "readlearn-backend"
    app_host: str = "0.0.0.0"
    app_port: int = 3001

    # === LLM ===
    anthropic_api_key: str = ""
    llm_provider: str = "anthropic"
    llm_model: str = "claude-haiku-4-5-20251001"
    llm_timeout_s: float = 60.0
    llm_temperature: float = 0.0
    llm_analysis_max_tokens: int = 512
    llm_definition_max_tokens: int = 150
    llm_batch_definition_max_tokens: int = 800

    # === Input limits ===
    max_text_words: int = 800
    max_text_length: int = 50_000
    default_language: str = "fr"

    # === Exact-match cache ===
    cache_enabled: bool = True
    cache_backend: Literal["memory", "sqlite", "redis"] = "sqlite"
    cache_db_path: Path = Path("~/.readlearn/cache.db")
    cache_redis_url: str = ""

    # === Similarity index ===
    similarity_backend: Literal["none", "sqlite", "chromadb"] = "sqlite"
    similarity_threshold: float = 0.90
    similarity_limit: int = 1
    vector_db_path: Path = Path("~/.readlearn/vectordb")
    vector_db_url: str = ""
    vector_db_collection: str = "article_embeddings"
    text_preview_chars: int = 500

    # === Embeddings ===
    embedding_provider: str = "sentence_transformers"
    embedding_model: str = "intfloat/multilingual-e5-base"
    embedding_dimensions: int = 768
    embedding_max_chars: int = 512
    embedding_preload: bool = False

    # === Definitions ===
    learned_dictionary_enabled: bool = True
    learned_dictionary_languages: list[str] = ["fr"]
    max_batch_words: int = 50

    # === Analytics ===
    analytics_enabled: bool = False

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("similarity_threshold")
    @classmethod
    def validate_similarity_threshold(cls, v: float) -> float:  # noqa: N805
        if not 0.0 <= v < 1.0:
            raise ValueError("similarity_threshold must be in [0, 1)")
        return v

    @field_validator("default_language")
    @classmethod
    def normalize_default_language(cls, v: str) -> str:  # noqa: N805
        return v.strip().lower()

    @field_validator("learned_dictionary_languages")
    @classmethod
    def normalize_dictionary_languages(cls, v: list[str]) -> list[str]:  # noqa: N805
        return [code.strip().lower() for code in v if code.strip()]

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.max_text_words < 10:
            errors.append("MAX_TEXT_WORDS must be >= 10")

        if self.similarity_limit < 1:
            errors.append("SIMILARITY_LIMIT must be >= 1")

        if self.cache_backend == "redis" and not self.cache_redis_url:
            errors.append("CACHE_REDIS_URL must be set when CACHE_BACKEND=redis")

        if self.embedding_max_chars < 1:
            errors.append("EMBEDDING_MAX_CHARS must be >= 1")

        if self.max_batch_words < 1:
            errors.append("MAX_BATCH_WORDS must be >= 1")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def similarity_enabled(self) -> bool:
        """Whether the vector-similarity tier is configured at all."""
        return self.similarity_backend != "none"

    @property
    def llm_configured(self) -> bool:
        return bool(self.anthropic_api_key)


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-process config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
