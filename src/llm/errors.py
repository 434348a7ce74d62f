# src/llm/errors.py — v1
"""LLM transport failures."""

from __future__ import annotations


class LLMTransportError(Exception):
    """The provider could not be reached or answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
