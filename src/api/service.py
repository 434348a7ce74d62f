# src/api/service.py — v1
"""Service container: builds and owns every long-lived component.

Usage:
    from readlearn.api.service import build_service
    service = build_service(settings)
    await service.startup()
    response = await service.analyze(text, url=url, language="fr")

The HTTP app and the CLI both go through this object, so wiring lives in
one place.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from readlearn.cache.cache_factory import create_cache_store
from readlearn.classification.cefr_classifier import CefrClassifier
from readlearn.classification.resolver import ClassificationResolver
from readlearn.config.settings import Settings, load_settings
from readlearn.core.models import AnalysisResponse, WordDefinition
from readlearn.definitions.definition_resolver import DefinitionResolver
from readlearn.definitions.learned_dictionary import create_learned_dictionary
from readlearn.definitions.vocabulary_store import create_vocabulary_store
from readlearn.llm.client_factory import create_llm_client
from readlearn.rag.embeddings.embedder_factory import create_embedding_service
from readlearn.rag.embeddings.embedding_service import EmbeddingService
from readlearn.rag.vector_store.vector_store_factory import create_similarity_index
from readlearn.tracking.stats_aggregator import window_start
from readlearn.tracking.usage_accountant import create_usage_accountant

if TYPE_CHECKING:
    from readlearn.cache.base_cache_store import BaseAnalysisCache
    from readlearn.definitions.learned_dictionary import BaseLearnedDictionary
    from readlearn.definitions.vocabulary_store import BaseVocabularyStore
    from readlearn.llm.base_client import BaseLLMClient
    from readlearn.rag.embeddings.base_embedder import BaseEmbedder
    from readlearn.rag.vector_store.base_vector_store import BaseSimilarityIndex
    from readlearn.tracking.usage_accountant import UsageAccountant

logger = logging.getLogger(__name__)


class ReadLearnService:
    """Owns the resolvers and the stores behind them."""

    def __init__(
        self,
        settings: Settings,
        resolver: ClassificationResolver,
        definitions: DefinitionResolver,
        cache: BaseAnalysisCache,
        vocabulary: BaseVocabularyStore,
        accountant: UsageAccountant,
        embeddings: EmbeddingService | None = None,
        index: BaseSimilarityIndex | None = None,
        dictionary: BaseLearnedDictionary | None = None,
    ) -> None:
        self.settings = settings
        self.resolver = resolver
        self.definitions = definitions
        self.cache = cache
        self.vocabulary = vocabulary
        self.accountant = accountant
        self.embeddings = embeddings
        self.index = index
        self.dictionary = dictionary

    async def startup(self) -> None:
        """Preload the embedding model when EMBEDDING_PRELOAD is set."""
        if self.settings.embedding_preload and self.embeddings is not None:
            ready = await self.embeddings.warm_up()
            logger.info("Embedding preload finished (available=%s)", ready)

    async def analyze(
        self,
        text: str,
        url: str | None = None,
        language: str | None = None,
        use_cache: bool = True,
    ) -> AnalysisResponse:
        return await self.resolver.resolve(
            text, url=url, language=language, use_cache=use_cache
        )

    async def define(
        self,
        word: str,
        context: str = "",
        language: str | None = None,
        force_ai: bool = False,
    ) -> WordDefinition:
        return await self.definitions.define(
            word, context=context, language=language, force_ai=force_ai
        )

    async def define_batch(
        self, words: list[str], language: str | None = None
    ) -> list[WordDefinition]:
        return await self.definitions.define_batch(words, language=language)

    def health(self) -> dict[str, Any]:
        """Liveness plus the state of optional subsystems."""
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "llm_configured": self.settings.llm_configured,
            "caching": self.settings.cache_enabled,
            "cache_backend": self.settings.cache_backend,
            "analytics": self.accountant.enabled,
            "similarity_backend": self.settings.similarity_backend,
            "embeddings": self.embeddings.state.value if self.embeddings else "disabled",
        }

    async def stats(self, hours: int = 24) -> dict[str, Any]:
        """Cache totals, similarity index size, and recent usage."""
        cache_stats = await self.cache.stats()
        indexed = await self.index.count() if self.index is not None else 0
        usage = await self.accountant.summarize(window_start(hours))
        return {
            "cache": cache_stats.model_dump(),
            "similarity": {
                "backend": self.settings.similarity_backend,
                "indexed_urls": indexed,
            },
            "vocabulary": {
                "total_words": await self.vocabulary.count(),
                "learned_words": await self.dictionary.count() if self.dictionary else 0,
            },
            f"usage_{hours}h": {
                **usage.model_dump(mode="json"),
                "cache_hit_rate": round(usage.cache_hit_rate, 4),
            },
        }

    def close(self) -> None:
        """Close every backend connection."""
        for component in (
            self.cache, self.index, self.vocabulary, self.dictionary, self.accountant
        ):
            if component is None:
                continue
            try:
                component.close()
            except Exception as e:
                logger.warning("Failed to close %s: %s", type(component).__name__, e)


def build_service(
    settings: Settings | None = None,
    llm: BaseLLMClient | None = None,
    embedder: BaseEmbedder | None = None,
) -> ReadLearnService:
    """Wire all components from settings.

    Args:
        settings: Application settings. Loaded from .env if None.
        llm: LLM client override. Built from settings if None.
        embedder: Embedder override. Built from settings if None.

    Returns:
        Ready-to-use ReadLearnService (embedding model not loaded yet).
    """
    settings = settings or load_settings()
    llm = llm or create_llm_client(settings)

    cache = create_cache_store(settings)
    accountant = create_usage_accountant(settings)

    embeddings: EmbeddingService | None = None
    index = create_similarity_index(settings)
    if index is not None:
        if embedder is not None:
            embeddings = EmbeddingService(embedder, max_chars=settings.embedding_max_chars)
        else:
            embeddings = create_embedding_service(settings)

    classifier = CefrClassifier(
        llm,
        max_tokens=settings.llm_analysis_max_tokens,
        temperature=settings.llm_temperature,
    )
    resolver = ClassificationResolver(
        classifier=classifier,
        cache=cache,
        accountant=accountant,
        settings=settings,
        embeddings=embeddings,
        index=index,
    )

    vocabulary = create_vocabulary_store(settings)
    dictionary = create_learned_dictionary(settings)
    definitions = DefinitionResolver(llm, vocabulary, accountant, settings, dictionary)

    logger.info(
        "Service ready: cache=%s, similarity=%s, analytics=%s, model=%s",
        settings.cache_backend, settings.similarity_backend,
        settings.analytics_enabled, llm.model_name,
    )
    return ReadLearnService(
        settings=settings,
        resolver=resolver,
        definitions=definitions,
        cache=cache,
        vocabulary=vocabulary,
        accountant=accountant,
        embeddings=embeddings,
        index=index,
        dictionary=dictionary,
    )
