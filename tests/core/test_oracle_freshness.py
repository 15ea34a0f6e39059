"""Tests for stablecdp/core/oracle.py: quote freshness decisions."""

import pytest

from stablecdp.core.cdp import PriceQuote, StalePriceError
from stablecdp.core.oracle import FreshnessPolicy, is_fresh, require_fresh


class TestIsFresh:
    def test_disabled_policy_accepts_anything(self):
        assert is_fresh(FreshnessPolicy(), PriceQuote(1, updated_at=0), 10**9)

    def test_within_window(self):
        policy = FreshnessPolicy(max_staleness_seconds=300)
        assert is_fresh(policy, PriceQuote(1, updated_at=1_000), 1_300)

    def test_past_window(self):
        policy = FreshnessPolicy(max_staleness_seconds=300)
        assert not is_fresh(policy, PriceQuote(1, updated_at=1_000), 1_301)

    def test_future_quote_rejected(self):
        policy = FreshnessPolicy(max_staleness_seconds=300)
        assert not is_fresh(policy, PriceQuote(1, updated_at=2_000), 1_000)

    def test_negative_now(self):
        with pytest.raises(ValueError):
            is_fresh(FreshnessPolicy(), PriceQuote(1), -1)

    def test_policy_validation(self):
        with pytest.raises(ValueError):
            FreshnessPolicy(max_staleness_seconds=0)


class TestRequireFresh:
    def test_returns_quote(self):
        quote = PriceQuote(5, updated_at=10)
        assert require_fresh(FreshnessPolicy(60), "weth", quote, 20) is quote

    def test_stale_raises_with_context(self):
        with pytest.raises(StalePriceError) as exc_info:
            require_fresh(FreshnessPolicy(60), "weth", PriceQuote(5, updated_at=10), 100)
        assert exc_info.value.context["asset"] == "weth"
        assert exc_info.value.context["max_age"] == 60
