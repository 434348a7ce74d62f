# src/definitions/definition_resolver.py — v2
"""Word definitions: vocabulary cache, learned dictionary, then the LLM.

A definition requested with surrounding context depends on that context,
so neither local tier is read or written for it. ``force_ai`` skips both
local reads; the answer is still learned and cached.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from readlearn.classification.errors import (
    ClassificationParseError,
    ClassificationTransportError,
)
from readlearn.classification.response_parser import (
    ParseFailure,
    parse_json_array,
    parse_json_payload,
)
from readlearn.config.languages import get_language_name, normalize_language
from readlearn.config.settings import Settings
from readlearn.core.models import WordDefinition
from readlearn.definitions.learned_dictionary import BaseLearnedDictionary
from readlearn.definitions.vocabulary_store import BaseVocabularyStore
from readlearn.llm.base_client import BaseLLMClient
from readlearn.llm.errors import LLMTransportError
from readlearn.llm.models import LLMResponse, Message
from readlearn.logging.context import set_tier
from readlearn.tracking.cost_calculator import compute_cost
from readlearn.tracking.usage_accountant import UsageAccountant

logger = logging.getLogger(__name__)

ACTION = "define"
BATCH_ACTION = "define-batch"

_PROMPTS_DIR = Path(__file__).parent / "prompts"


class DefinitionResolver:
    """Defines words for the reader's vocabulary deck."""

    def __init__(
        self,
        llm: BaseLLMClient,
        store: BaseVocabularyStore,
        accountant: UsageAccountant,
        settings: Settings,
        dictionary: BaseLearnedDictionary | None = None,
    ) -> None:
        self._llm = llm
        self._store = store
        self._accountant = accountant
        self._settings = settings
        self._dictionary = dictionary
        self._prompts: dict[str, str] = {}

    async def define(
        self,
        word: str,
        context: str = "",
        language: str | None = None,
        force_ai: bool = False,
    ) -> WordDefinition:
        """Define ``word``, optionally as used in ``context``.

        Raises:
            ClassificationTransportError: The LLM could not be reached.
            ClassificationParseError: The answer held no usable definition.
        """
        language = normalize_language(language, self._settings.default_language)
        word = word.strip()

        if not context and not force_ai:
            local = await self._local_definition(word, language)
            if local is not None:
                await self._accountant.record(ACTION, language, cache_hit=True)
                return local

        set_tier("remote")
        definition, tokens, cost = await self._ask_llm(word, context, language)

        if not context:
            await self._remember(definition)

        await self._accountant.record(
            ACTION, language, cache_hit=False, tokens=tokens, cost_usd=cost
        )
        return definition

    async def define_batch(
        self, words: list[str], language: str | None = None
    ) -> list[WordDefinition]:
        """Define several words, asking the LLM once for every local miss.

        Results follow the order of ``words`` with duplicates removed. Words
        the LLM leaves out, or an unparseable batch answer, yield no entry.

        Raises:
            ClassificationTransportError: The LLM could not be reached.
        """
        language = normalize_language(language, self._settings.default_language)
        requested: list[str] = []
        seen: set[str] = set()
        for raw in words:
            word = raw.strip()
            if word and word.lower() not in seen:
                seen.add(word.lower())
                requested.append(word)

        found: dict[str, WordDefinition] = {}
        pending: list[str] = []
        for word in requested:
            local = await self._local_definition(word, language)
            if local is not None:
                found[word.lower()] = local
            else:
                pending.append(word)
        logger.info("Batch define: %d local, %d to the LLM", len(found), len(pending))

        if not pending:
            await self._accountant.record(BATCH_ACTION, language, cache_hit=True)
            return [found[w.lower()] for w in requested]

        set_tier("remote")
        prompt = self._format_prompt(
            "word_batch_definition.txt",
            language_name=get_language_name(language),
            words=", ".join(pending),
        )
        response, tokens, cost = await self._complete(
            prompt, self._settings.llm_batch_definition_max_tokens, BATCH_ACTION, language
        )

        outcome = parse_json_array(response.content)
        if isinstance(outcome, ParseFailure):
            logger.error("Unparseable batch definition response: %s", outcome.reason)
            await self._accountant.record(
                BATCH_ACTION, language, cache_hit=False, tokens=tokens, cost_usd=cost,
                status="failed",
            )
        else:
            wanted = {w.lower() for w in pending}
            for item in outcome.items:
                word = str(item.get("word") or "").strip()
                key = word.lower()
                if key not in wanted or key in found or not item.get("definition"):
                    continue
                definition = _to_definition(word, language, item)
                found[key] = definition
                await self._remember(definition)
            await self._accountant.record(
                BATCH_ACTION, language, cache_hit=False, tokens=tokens, cost_usd=cost
            )

        return [found[w.lower()] for w in requested if w.lower() in found]

    # --- Local tiers ---

    async def _local_definition(self, word: str, language: str) -> WordDefinition | None:
        if self._settings.cache_enabled:
            try:
                cached = await self._store.get(word, language)
            except Exception as e:
                logger.warning("Vocabulary cache lookup failed: %s", e)
                cached = None
            if cached is not None:
                set_tier("vocabulary")
                return cached.model_copy(update={"source": "cache", "cached": True})

        if not self._dictionary_covers(language):
            return None
        try:
            learned = await self._dictionary.lookup(word, language)
        except Exception as e:
            logger.warning("Learned dictionary lookup failed: %s", e)
            return None
        if learned is None:
            return None

        set_tier("dictionary")
        logger.info("Learned dictionary hit: %r", word)
        if self._settings.cache_enabled:
            await self._cache_quietly(learned)
        return learned

    async def _remember(self, definition: WordDefinition) -> None:
        """Learn an AI definition and write it through to the vocabulary cache."""
        if self._dictionary_covers(definition.language) and definition.translation:
            try:
                await self._dictionary.learn(definition)
            except Exception as e:
                logger.error("Learned dictionary write failed: %s", e)
        if self._settings.cache_enabled:
            await self._cache_quietly(definition)

    async def _cache_quietly(self, definition: WordDefinition) -> None:
        try:
            await self._store.put(definition)
        except Exception as e:
            logger.error("Vocabulary cache write failed: %s", e)

    def _dictionary_covers(self, language: str) -> bool:
        return (
            self._dictionary is not None
            and language in self._settings.learned_dictionary_languages
        )

    # --- LLM ---

    def _format_prompt(self, name: str, **fields: str) -> str:
        if name not in self._prompts:
            self._prompts[name] = (_PROMPTS_DIR / name).read_text(encoding="utf-8")
        return self._prompts[name].format(**fields)

    async def _complete(
        self, prompt: str, max_tokens: int, action: str, language: str
    ) -> tuple[LLMResponse, int, float]:
        try:
            response = await self._llm.complete(
                [Message(role="user", content=prompt)],
                max_tokens=max_tokens,
                temperature=self._settings.llm_temperature,
            )
        except LLMTransportError as e:
            await self._accountant.record(action, language, cache_hit=False, status="failed")
            raise ClassificationTransportError(str(e), status_code=e.status_code) from e

        tokens = response.input_tokens + response.output_tokens
        cost = compute_cost(self._llm.model_name, response.input_tokens, response.output_tokens)
        return response, tokens, cost

    async def _ask_llm(
        self, word: str, context: str, language: str
    ) -> tuple[WordDefinition, int, float]:
        prompt = self._format_prompt(
            "word_definition.txt",
            language_name=get_language_name(language),
            word=word,
            context_clause=f' in context: "{context}"' if context else "",
        )
        response, tokens, cost = await self._complete(
            prompt, self._settings.llm_definition_max_tokens, ACTION, language
        )

        outcome = parse_json_payload(response.content)
        payload = None if isinstance(outcome, ParseFailure) else outcome.payload
        if not payload or not payload.get("definition"):
            await self._accountant.record(
                ACTION, language, cache_hit=False, tokens=tokens, cost_usd=cost,
                status="failed",
            )
            logger.error("Unparseable definition response for %r", word)
            raise ClassificationParseError(
                "Failed to parse definition",
                raw_content=response.content,
                input_tokens=response.input_tokens,
                output_tokens=response.output_tokens,
                cost_usd=cost,
            )
        return _to_definition(word, language, payload), tokens, cost


def _to_definition(word: str, language: str, payload: dict[str, Any]) -> WordDefinition:
    return WordDefinition(
        word=word.lower(),
        language=language,
        definition=str(payload["definition"]),
        translation=str(payload.get("translation") or ""),
        cefr=str(payload["cefr"]).upper() if payload.get("cefr") else None,
        type=str(payload.get("type") or "unknown"),
        source="ai",
        cached=False,
    )
