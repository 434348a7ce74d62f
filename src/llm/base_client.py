# src/llm/base_client.py — v2
"""Abstract LLM client interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from readlearn.llm.models import LLMResponse, Message


class BaseLLMClient(ABC):
    """Unified interface for LLM providers.

    Implementations raise ``LLMTransportError`` for every failure to obtain
    a response (non-2xx status, network error, timeout). Interpreting the
    response text is the caller's job.
    """

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 512,
        temperature: float = 0.0,
    ) -> LLMResponse:
        """Text completion."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model identifier, used for cost accounting."""
