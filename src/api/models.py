# src/api/models.py — v3
"""HTTP request bodies for the FastAPI layer.

Shape checks live here; content rules that depend on settings (length
bounds, supported languages) live in api.validation.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class AnalyzeRequest(BaseModel):
    """Body of POST /analyze."""

    model_config = ConfigDict(populate_by_name=True)

    text: StrictStr
    url: str | None = None
    language: str | None = None
    use_cache: bool = Field(default=True, alias="useCache")


class DefineRequest(BaseModel):
    """Body of POST /define."""

    model_config = ConfigDict(populate_by_name=True)

    word: StrictStr
    context: str = ""
    language: str | None = None
    force_ai: bool = Field(default=False, alias="forceAI")


class BatchWord(BaseModel):
    word: StrictStr


class DefineBatchRequest(BaseModel):
    """Body of POST /define-batch. Words may be bare strings or ``{"word": ...}``."""

    words: list[StrictStr | BatchWord]
    language: str | None = None

    def word_list(self) -> list[str]:
        return [w if isinstance(w, str) else w.word for w in self.words]
