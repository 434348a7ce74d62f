# tests/unit/classification/test_unit_cefr_classifier.py — v1
"""Tests for classification/cefr_classifier.py — mocked LLM."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from readlearn.classification.cefr_classifier import CefrClassifier
from readlearn.classification.errors import (
    ClassificationParseError,
    ClassificationTransportError,
)
from readlearn.llm.errors import LLMTransportError
from tests.fakes import CEFR_PAYLOAD, make_llm_response

HAIKU_COST = (100 * 0.80 + 50 * 4.0) / 1_000_000


class TestCefrClassifier:

    @pytest.mark.asyncio
    async def test_classify(self, mock_llm_client):
        outcome = await CefrClassifier(mock_llm_client).classify("Le chat dort.", "fr")
        assert outcome.result.cefr_level == "B2"
        assert outcome.result.vocabulary_examples == CEFR_PAYLOAD["vocabulary_examples"]
        assert outcome.input_tokens == 100
        assert outcome.output_tokens == 50
        assert outcome.tokens_used == 150
        assert outcome.cost_usd == pytest.approx(HAIKU_COST)
        assert outcome.model == "claude-haiku-4-5-20251001"

    @pytest.mark.asyncio
    async def test_prompt_names_language_and_embeds_sample(self, mock_llm_client):
        await CefrClassifier(mock_llm_client, max_tokens=300).classify("Hallo Welt, wie geht's?", "de")
        call = mock_llm_client.complete.call_args
        messages = call.args[0]
        assert len(messages) == 1
        assert messages[0].role == "user"
        assert "German text" in messages[0].content
        assert "Hallo Welt, wie geht's?" in messages[0].content
        assert '"cefr_level": "B2"' in messages[0].content
        assert call.kwargs["max_tokens"] == 300
        assert call.kwargs["temperature"] == 0.0

    @pytest.mark.asyncio
    async def test_fenced_and_lowercase_level(self, mock_llm_client):
        mock_llm_client.complete.return_value = make_llm_response(
            '```json\n{"cefr_level": "c1", "confidence": "HIGH"}\n```'
        )
        outcome = await CefrClassifier(mock_llm_client).classify("texte", "fr")
        assert outcome.result.cefr_level == "C1"
        assert outcome.result.confidence == "high"
        assert outcome.result.grammar_features == []

    @pytest.mark.asyncio
    async def test_transport_error(self, mock_llm_client):
        mock_llm_client.complete.side_effect = LLMTransportError("boom", status_code=503)
        with pytest.raises(ClassificationTransportError) as exc_info:
            await CefrClassifier(mock_llm_client).classify("texte", "fr")
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_unparseable_carries_usage(self, mock_llm_client):
        mock_llm_client.complete.return_value = make_llm_response(
            "Sorry, I can't help with that.", input_tokens=80, output_tokens=12
        )
        with pytest.raises(ClassificationParseError) as exc_info:
            await CefrClassifier(mock_llm_client).classify("texte", "fr")
        err = exc_info.value
        assert err.tokens_used == 92
        assert err.cost_usd > 0
        assert err.raw_content.startswith("Sorry")

    @pytest.mark.asyncio
    async def test_invalid_level(self, mock_llm_client):
        mock_llm_client.complete.return_value = make_llm_response({"cefr_level": "D4"})
        with pytest.raises(ClassificationParseError, match="invalid cefr_level"):
            await CefrClassifier(mock_llm_client).classify("texte", "fr")

    @pytest.mark.asyncio
    async def test_missing_level(self, mock_llm_client):
        mock_llm_client.complete.return_value = make_llm_response({"reasoning": "unsure"})
        with pytest.raises(ClassificationParseError):
            await CefrClassifier(mock_llm_client).classify("texte", "fr")

    @pytest.mark.asyncio
    async def test_unknown_model_costs_zero(self):
        llm = AsyncMock()
        llm.complete = AsyncMock(return_value=make_llm_response(CEFR_PAYLOAD))
        llm.model_name = "some-future-model"
        outcome = await CefrClassifier(llm).classify("texte", "fr")
        assert outcome.cost_usd == 0.0
