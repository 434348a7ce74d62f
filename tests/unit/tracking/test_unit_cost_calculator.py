# tests/unit/tracking/test_unit_cost_calculator.py — v1
"""Tests for tracking/cost_calculator.py."""

from __future__ import annotations

import pytest

from readlearn.tracking.cost_calculator import DEFAULT_PRICING, compute_cost
from readlearn.tracking.models import ModelPricing


class TestComputeCost:
    def test_haiku(self):
        cost = compute_cost("claude-haiku-4-5-20251001", 1_000_000, 1_000_000)
        assert cost == pytest.approx(4.80)

    def test_sonnet(self):
        cost = compute_cost("claude-sonnet-4-20250514", 2000, 500)
        assert cost == pytest.approx(2000 * 3.0 / 1e6 + 500 * 15.0 / 1e6)

    def test_zero_tokens(self):
        assert compute_cost("claude-haiku-4-5-20251001", 0, 0) == 0.0

    def test_unknown_model(self, caplog):
        with caplog.at_level("WARNING", logger="readlearn"):
            assert compute_cost("gpt-unknown", 1000, 1000) == 0.0
        assert "No pricing for model gpt-unknown" in caplog.text

    def test_custom_pricing(self):
        pricing = {"local": ModelPricing(model="local", input_price_per_1m=1.0, output_price_per_1m=2.0)}
        assert compute_cost("local", 1_000_000, 500_000, pricing=pricing) == pytest.approx(2.0)

    def test_default_model_is_priced(self):
        assert "claude-haiku-4-5-20251001" in DEFAULT_PRICING
