# src/tracking/cost_calculator.py — v2
"""Cost calculation from token counts.

Prices are USD per 1M tokens.
"""

from __future__ import annotations

import logging

from readlearn.tracking.models import ModelPricing

logger = logging.getLogger(__name__)

DEFAULT_PRICING: dict[str, ModelPricing] = {
    "claude-haiku-4-5-20251001": ModelPricing(
        model="claude-haiku-4-5-20251001",
        input_price_per_1m=0.80, output_price_per_1m=4.0,
    ),
    "claude-sonnet-4-20250514": ModelPricing(
        model="claude-sonnet-4-20250514",
        input_price_per_1m=3.0, output_price_per_1m=15.0,
    ),
}


def compute_cost(
    model: str,
    input_tokens: int,
    output_tokens: int,
    pricing: dict[str, ModelPricing] | None = None,
) -> float:
    """Compute estimated cost of one call in USD.

    Unknown models cost 0.0 and are logged, so accounting never blocks a request.
    """
    pricing = pricing or DEFAULT_PRICING
    p = pricing.get(model)
    if p is None:
        logger.warning("No pricing for model %s, recording zero cost", model)
        return 0.0

    return (input_tokens * p.input_price_per_1m / 1_000_000
            + output_tokens * p.output_price_per_1m / 1_000_000)
