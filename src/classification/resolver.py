# src/classification/resolver.py — v1
"""Three-tier CEFR classification resolver.

Resolution order for one request:
  1. sample the text and hash the sample
  2. exact-match cache on the hash
  3. similarity index on the sample embedding (exact miss only)
  4. remote classification, then write-through to both caches

Every outcome, including failures, is reported to the usage accountant.
Cache reads and writes degrade silently: a broken cache costs an LLM call,
never a failed request.
"""

from __future__ import annotations

import logging

from readlearn.cache.base_cache_store import BaseAnalysisCache
from readlearn.cache.fingerprint import content_hash
from readlearn.classification.cefr_classifier import CefrClassifier, ClassificationOutcome
from readlearn.classification.errors import (
    ClassificationParseError,
    ClassificationTransportError,
)
from readlearn.config.languages import normalize_language
from readlearn.config.settings import Settings
from readlearn.core.models import (
    AnalysisCacheEntry,
    AnalysisResponse,
    ArticleEmbeddingEntry,
    Sample,
    SimilarArticle,
)
from readlearn.core.sampler import smart_sample
from readlearn.logging.context import set_tier
from readlearn.rag.embeddings.embedding_service import EmbeddingService
from readlearn.rag.vector_store.base_vector_store import BaseSimilarityIndex
from readlearn.tracking.usage_accountant import UsageAccountant

logger = logging.getLogger(__name__)

ACTION = "analyze"


class ClassificationResolver:
    """Resolves a text to a CEFR assessment at the lowest available cost."""

    def __init__(
        self,
        classifier: CefrClassifier,
        cache: BaseAnalysisCache,
        accountant: UsageAccountant,
        settings: Settings,
        embeddings: EmbeddingService | None = None,
        index: BaseSimilarityIndex | None = None,
    ) -> None:
        self._classifier = classifier
        self._cache = cache
        self._accountant = accountant
        self._settings = settings
        self._embeddings = embeddings
        self._index = index

    async def resolve(
        self,
        text: str,
        url: str | None = None,
        language: str | None = None,
        use_cache: bool = True,
    ) -> AnalysisResponse:
        """Classify ``text``, serving from cache whenever possible.

        Args:
            text: Raw article text.
            url: Source URL, key of the similarity index.
            language: ISO 639-1 code; defaults to DEFAULT_LANGUAGE.
            use_cache: When False, both cache reads are skipped. Results are
                still written through while caching is enabled.

        Raises:
            ClassificationTransportError: The remote classifier was unreachable.
            ClassificationParseError: The remote answer was unusable.
        """
        language = normalize_language(language, self._settings.default_language)
        sample = smart_sample(text, self._settings.max_text_words)
        text_hash = content_hash(sample.text)
        logger.info(
            "Analyze: %d words -> %d (sampled=%s), hash=%s",
            sample.original_word_count,
            sample.sampled_word_count if sample.sampled else sample.original_word_count,
            sample.sampled,
            text_hash[:12],
        )

        embedding: list[float] | None = None
        if use_cache and self._settings.cache_enabled:
            cached = await self._exact_lookup(text_hash, language)
            if cached is not None:
                return cached

            if self._similarity_ready():
                embedding = await self._embeddings.embed(sample.text)
                similar = await self._similarity_lookup(embedding, language)
                if similar is not None:
                    return similar

        set_tier("remote")
        outcome = await self._classify(sample, language)

        if self._settings.cache_enabled:
            await self._write_through(text, url, language, sample, text_hash, outcome, embedding)

        await self._accountant.record(
            ACTION, language, cache_hit=False,
            tokens=outcome.tokens_used, cost_usd=outcome.cost_usd,
        )
        logger.info(
            "Remote classification %s: %d tokens, $%.6f",
            outcome.result.cefr_level, outcome.tokens_used, outcome.cost_usd,
        )
        return AnalysisResponse(
            **outcome.result.model_dump(), language=language, cached=False
        )

    # --- Tiers ---

    async def _exact_lookup(self, text_hash: str, language: str) -> AnalysisResponse | None:
        try:
            entry = await self._cache.touch(text_hash)
        except Exception as e:
            logger.warning("Exact cache lookup failed, continuing: %s", e)
            return None
        if entry is None:
            logger.debug("Exact cache miss")
            return None

        set_tier("exact")
        logger.info("Exact cache hit (hit_count=%d)", entry.hit_count)
        await self._accountant.record(ACTION, entry.language or language, cache_hit=True)
        return AnalysisResponse(
            **entry.to_result().model_dump(),
            language=entry.language or language,
            cached=True,
            hit_count=entry.hit_count,
            cache_type="exact",
        )

    async def _similarity_lookup(
        self, embedding: list[float] | None, language: str
    ) -> AnalysisResponse | None:
        if embedding is None:
            return None
        try:
            matches = await self._index.find_similar(
                embedding,
                threshold=self._settings.similarity_threshold,
                limit=self._settings.similarity_limit,
            )
        except Exception as e:
            logger.warning("Similarity lookup failed, continuing: %s", e)
            return None
        if not matches:
            logger.debug(
                "No similar article above %.2f", self._settings.similarity_threshold
            )
            return None

        best = matches[0]
        try:
            await self._index.touch(best.url)
        except Exception as e:
            logger.warning("Failed to bump access count for %s: %s", best.url, e)

        set_tier("vector_similarity")
        logger.info("Similarity hit: %.1f%% similar to %s", best.similarity * 100, best.url)
        await self._accountant.record(ACTION, language, cache_hit=True)
        return _similarity_response(best, language)

    async def _classify(self, sample: Sample, language: str) -> ClassificationOutcome:
        try:
            return await self._classifier.classify(sample.text, language)
        except ClassificationTransportError:
            await self._accountant.record(ACTION, language, cache_hit=False, status="failed")
            raise
        except ClassificationParseError as e:
            await self._accountant.record(
                ACTION, language, cache_hit=False,
                tokens=e.tokens_used, cost_usd=e.cost_usd, status="failed",
            )
            raise

    async def _write_through(
        self,
        text: str,
        url: str | None,
        language: str,
        sample: Sample,
        text_hash: str,
        outcome: ClassificationOutcome,
        embedding: list[float] | None,
    ) -> None:
        result = outcome.result
        try:
            await self._cache.upsert(
                AnalysisCacheEntry(
                    text_hash=text_hash,
                    url=url,
                    language=language,
                    word_count=sample.original_word_count,
                    **result.model_dump(),
                )
            )
        except Exception as e:
            logger.error("Exact cache write failed: %s", e)

        # URL-less requests never populate the similarity index.
        if not url or not self._similarity_ready():
            return
        try:
            if embedding is None:
                embedding = await self._embeddings.embed(sample.text)
            if embedding is None:
                return
            await self._index.upsert(
                ArticleEmbeddingEntry(
                    url=url,
                    url_hash=content_hash(url),
                    text_preview=text[: self._settings.text_preview_chars],
                    embedding=embedding,
                    cefr_level=result.cefr_level,
                    language=language,
                    word_count=sample.original_word_count,
                )
            )
        except Exception as e:
            logger.error("Similarity index write failed for %s: %s", url, e)

    def _similarity_ready(self) -> bool:
        return self._embeddings is not None and self._index is not None


def _similarity_response(match: SimilarArticle, language: str) -> AnalysisResponse:
    """Build the reduced-detail result served from a similarity match."""
    return AnalysisResponse(
        cefr_level=match.entry.cefr_level,
        confidence="high",
        vocabulary_examples=[],
        grammar_features=[],
        reasoning=(
            f"Similar to previously analyzed article "
            f"({match.similarity * 100:.1f}% match: {match.url})"
        ),
        language=language,
        cached=True,
        cache_type="vector_similarity",
        similar_url=match.url,
        similarity_score=match.similarity,
    )
