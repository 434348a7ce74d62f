# src/classification/errors.py — v1
"""Classification failures surfaced to callers of the resolver."""

from __future__ import annotations


class ClassificationError(Exception):
    """Base class for remote classification failures."""


class ClassificationTransportError(ClassificationError):
    """The remote classifier could not be reached or returned a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ClassificationParseError(ClassificationError):
    """The remote classifier answered, but no valid result could be extracted.

    Carries the tokens already spent so the failed request can be accounted.
    """

    def __init__(
        self,
        message: str,
        raw_content: str = "",
        input_tokens: int = 0,
        output_tokens: int = 0,
        cost_usd: float = 0.0,
    ) -> None:
        self.raw_content = raw_content
        self.input_tokens = input_tokens
        self.output_tokens = output_tokens
        self.cost_usd = cost_usd
        super().__init__(message)

    @property
    def tokens_used(self) -> int:
        return self.input_tokens + self.output_tokens
