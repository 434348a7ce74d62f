# src/tracking/models.py — v2
"""Tracking domain models: UsageEvent, UsageSummary, ModelPricing."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from readlearn.core.models import utcnow

UsageAction = Literal["analyze", "define"]


class UsageEvent(BaseModel):
    """One append-only usage log row, written per resolved request."""

    action: str
    language: str
    cache_hit: bool
    tokens_used: int = 0
    cost_usd: float = 0.0
    status: Literal["success", "failed"] = "success"
    timestamp: datetime = Field(default_factory=utcnow)


class UsageSummary(BaseModel):
    """Aggregated usage over a time window."""

    since: datetime
    total_requests: int = 0
    cache_hits: int = 0
    failed_requests: int = 0
    total_tokens: int = 0
    total_cost_usd: float = 0.0
    by_action: dict[str, int] = {}

    @property
    def cache_hit_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.cache_hits / self.total_requests


class ModelPricing(BaseModel):
    """LLM model pricing configuration."""

    model: str
    input_price_per_1m: float
    output_price_per_1m: float
