# src/classification/cefr_classifier.py — v1
"""Remote CEFR classification of a text sample.

One LLM call per sample. Transport failures and unusable responses are
mapped to the classification error types; token usage and cost are
returned alongside the result so the caller can account for them.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ValidationError

from readlearn.classification.errors import (
    ClassificationParseError,
    ClassificationTransportError,
)
from readlearn.classification.response_parser import ParseFailure, parse_json_payload
from readlearn.config.languages import get_language_name
from readlearn.core.models import ClassificationResult
from readlearn.llm.base_client import BaseLLMClient
from readlearn.llm.errors import LLMTransportError
from readlearn.llm.models import Message
from readlearn.tracking.cost_calculator import compute_cost

logger = logging.getLogger(__name__)

_PROMPT_PATH = Path(__file__).parent / "prompts" / "cefr_analysis.txt"


class ClassificationOutcome(BaseModel):
    """Parsed result plus the cost of obtaining it."""

    result: ClassificationResult
    input_tokens: int
    output_tokens: int
    cost_usd: float
    model: str

    @property
    def tokens_used(self) -> int:
        return self.input_tokens + self.output_tokens


class CefrClassifier:
    """Asks the LLM for a CEFR assessment and validates the answer."""

    def __init__(
        self,
        llm: BaseLLMClient,
        max_tokens: int = 512,
        temperature: float = 0.0,
    ) -> None:
        self._llm = llm
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._prompt_template: str | None = None

    def _load_prompt(self) -> str:
        if self._prompt_template is None:
            self._prompt_template = _PROMPT_PATH.read_text(encoding="utf-8")
        return self._prompt_template

    def _format_prompt(self, sample_text: str, language: str) -> str:
        return self._load_prompt().format(
            language_name=get_language_name(language),
            sample_text=sample_text,
        )

    async def classify(self, sample_text: str, language: str) -> ClassificationOutcome:
        """Classify ``sample_text`` written in ``language``.

        Raises:
            ClassificationTransportError: The LLM could not be reached.
            ClassificationParseError: The answer held no valid assessment.
        """
        messages = [Message(role="user", content=self._format_prompt(sample_text, language))]
        try:
            response = await self._llm.complete(
                messages,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
            )
        except LLMTransportError as e:
            raise ClassificationTransportError(str(e), status_code=e.status_code) from e

        cost = compute_cost(
            self._llm.model_name, response.input_tokens, response.output_tokens
        )

        outcome = parse_json_payload(response.content)
        if isinstance(outcome, ParseFailure):
            logger.error("Unparseable classification response: %s", outcome.reason)
            raise ClassificationParseError(
                f"Failed to parse analysis: {outcome.reason}",
                raw_content=response.content,
                input_tokens=response.input_tokens,
                output_tokens=response.output_tokens,
                cost_usd=cost,
            )

        try:
            result = ClassificationResult.model_validate(outcome.payload)
        except ValidationError as e:
            logger.error("Invalid classification payload: %s", e.errors()[0]["msg"])
            raise ClassificationParseError(
                "Failed to parse analysis: invalid cefr_level or fields",
                raw_content=response.content,
                input_tokens=response.input_tokens,
                output_tokens=response.output_tokens,
                cost_usd=cost,
            ) from e

        logger.debug(
            "Classified as %s (%d in / %d out tokens, strategy=%s)",
            result.cefr_level, response.input_tokens, response.output_tokens,
            outcome.strategy,
        )
        return ClassificationOutcome(
            result=result,
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
            cost_usd=cost,
            model=self._llm.model_name,
        )
