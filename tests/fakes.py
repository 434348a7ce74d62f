# tests/fakes.py — v1
"""Test doubles and sample data shared across the suite."""

from __future__ import annotations

import hashlib
import json
import math
import threading
import time

from readlearn.llm.models import LLMResponse
from readlearn.rag.embeddings.base_embedder import BaseEmbedder

HAIKU = "claude-haiku-4-5-20251001"

CEFR_PAYLOAD = {
    "cefr_level": "B2",
    "confidence": "high",
    "vocabulary_examples": ["néanmoins", "enjeu", "davantage"],
    "grammar_features": ["subjonctif", "passé composé"],
    "reasoning": "Abstract vocabulary and subordinate clauses.",
}

ARTICLE_FR = (
    "Le gouvernement a présenté mardi un projet de loi destiné à renforcer "
    "la protection des données personnelles. Selon le ministre, les entreprises "
    "devront désormais informer leurs clients de toute fuite dans un délai de "
    "soixante-douze heures. Les associations de consommateurs saluent une avancée "
    "importante mais regrettent que les sanctions restent limitées. Plusieurs "
    "députés de l'opposition estiment néanmoins que le texte arrive trop tard et "
    "réclament davantage de moyens pour l'autorité de contrôle."
)

UNRELATED_FR = (
    "Recette facile: faites fondre le beurre, ajoutez la farine, versez le lait "
    "petit à petit en remuant sans cesse, salez, poivrez, râpez un peu de muscade "
    "et laissez épaissir cinq minutes à feu doux avant de servir chaud."
)


def make_llm_response(
    content: str | dict,
    input_tokens: int = 100,
    output_tokens: int = 50,
    model: str = HAIKU,
) -> LLMResponse:
    if isinstance(content, dict):
        content = json.dumps(content, ensure_ascii=False)
    return LLMResponse(
        content=content,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        model=model,
        provider="anthropic",
        latency_ms=120,
    )


class FakeEmbedder(BaseEmbedder):
    """Deterministic bag-of-words embedder.

    Each word is hashed into one of ``dimensions`` buckets, so texts sharing
    most words are highly similar and unrelated texts are not.
    """

    def __init__(
        self,
        dimensions: int = 512,
        fail_load: bool = False,
        load_delay_s: float = 0.0,
    ) -> None:
        self._dimensions = dimensions
        self._fail_load = fail_load
        self._load_delay_s = load_delay_s
        self._lock = threading.Lock()
        self.load_calls = 0
        self.embed_calls = 0
        self.fail_embed = False

    def load(self) -> None:
        with self._lock:
            self.load_calls += 1
        if self._load_delay_s:
            time.sleep(self._load_delay_s)
        if self._fail_load:
            raise OSError("model weights not found")

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        return [self.embed_query(t) for t in texts]

    def embed_query(self, query: str) -> list[float]:
        self.embed_calls += 1
        if self.fail_embed:
            raise RuntimeError("encode failed")
        vec = [0.0] * self._dimensions
        for word in query.lower().split():
            bucket = int(hashlib.md5(word.encode("utf-8")).hexdigest(), 16) % self._dimensions
            vec[bucket] += 1.0
        norm = math.sqrt(sum(v * v for v in vec)) or 1.0
        return [v / norm for v in vec]

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def provider_name(self) -> str:
        return "fake"

    @property
    def model_name(self) -> str:
        return "fake-bow"


