"""Tests for stablecdp/core/cdp/math.py: pure fixed-point arithmetic."""

import pytest

from stablecdp.core.cdp.errors import DivisionByZeroError
from stablecdp.core.cdp.math import (
    ADDITIONAL_FEED_PRECISION,
    MAX_HEALTH_FACTOR,
    MIN_HEALTH_FACTOR,
    PRECISION,
    asset_amount_from_pegged_value,
    asset_amount_from_reference_value,
    health_factor,
    is_healthy,
    legacy_asset_amount_from_pegged_value,
    liquidation_bonus,
    normalize_price,
    pegged_value,
    reference_value,
    threshold_adjusted,
)

E18 = 10**18
ETH_2000 = 2000 * E18  # normalized 18-decimal price


# ---------------------------------------------------------------------------
# Price normalization
# ---------------------------------------------------------------------------

class TestNormalizePrice:
    def test_eight_decimal_feed(self):
        assert normalize_price(2000 * 10**8, 8) == 2000 * 10**8 * ADDITIONAL_FEED_PRECISION
        assert normalize_price(2000 * 10**8, 8) == ETH_2000

    def test_eighteen_decimal_feed_unchanged(self):
        assert normalize_price(ETH_2000, 18) == ETH_2000

    def test_more_than_eighteen_decimals_truncates(self):
        assert normalize_price(123_456, 20) == 1_234

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            normalize_price(-1)


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------

class TestReferenceValue:
    def test_fifteen_eth(self):
        # 15 ETH * $2000 = $30,000
        assert reference_value(ETH_2000, 15 * E18) == 30_000 * E18

    def test_truncates(self):
        assert reference_value(3, 1) == 0

    def test_zero_amount(self):
        assert reference_value(ETH_2000, 0) == 0


class TestAssetAmountFromReferenceValue:
    def test_hundred_dollars(self):
        # $100 / $2000 = 0.05 ETH
        assert asset_amount_from_reference_value(ETH_2000, 100 * E18) == 5 * 10**16

    def test_zero_price(self):
        with pytest.raises(DivisionByZeroError):
            asset_amount_from_reference_value(0, 100 * E18)

    def test_zero_price_is_zero_division(self):
        with pytest.raises(ZeroDivisionError):
            asset_amount_from_reference_value(0, 1)


class TestPeggedValue:
    def test_rate_scenario(self):
        # 25 units at 2000 -> 50,000 reference -> 4,500,000 pegged at rate 90
        assert reference_value(ETH_2000, 25 * E18) == 50_000 * E18
        assert pegged_value(ETH_2000, 25 * E18, 90) == 4_500_000 * E18

    def test_rate_one_equals_reference(self):
        assert pegged_value(ETH_2000, 3 * E18, 1) == reference_value(ETH_2000, 3 * E18)


class TestPeggedInversion:
    def test_exact_round_trip(self):
        value = pegged_value(ETH_2000, 25 * E18, 90)
        assert asset_amount_from_pegged_value(ETH_2000, value, 90) == 25 * E18

    def test_exact_truncation_bound(self):
        amount = 7
        value = pegged_value(ETH_2000, amount, 90)
        back = asset_amount_from_pegged_value(ETH_2000, value, 90)
        assert back <= amount
        assert amount - back <= PRECISION // ETH_2000 + 1

    def test_exact_zero_rate(self):
        with pytest.raises(DivisionByZeroError):
            asset_amount_from_pegged_value(ETH_2000, E18, 0)

    def test_legacy_divides_then_remultiplies(self):
        value = 4_500_000 * E18
        expected = asset_amount_from_reference_value(ETH_2000, value // 90) * 90
        assert legacy_asset_amount_from_pegged_value(ETH_2000, value, 90) == expected
        assert expected == 25 * E18 * 90

    def test_legacy_drops_remainder(self):
        # 179 // 90 == 1: the remainder 89 never reaches the conversion
        assert legacy_asset_amount_from_pegged_value(E18, 179, 90) == 90

    def test_legacy_matches_exact_at_rate_one(self):
        v = 12_345 * E18
        assert legacy_asset_amount_from_pegged_value(ETH_2000, v, 1) == asset_amount_from_pegged_value(ETH_2000, v, 1)


# ---------------------------------------------------------------------------
# Health factor
# ---------------------------------------------------------------------------

class TestHealthFactor:
    def test_zero_debt_is_max(self):
        assert health_factor(0, 0) == MAX_HEALTH_FACTOR
        assert health_factor(10**30, 0) == MAX_HEALTH_FACTOR

    def test_basic(self):
        # $20,000 collateral, 100 debt, 50% threshold -> 100.0
        assert health_factor(20_000 * E18, 100 * E18) == 100 * E18

    def test_exactly_at_minimum(self):
        assert health_factor(200 * E18, 100 * E18) == MIN_HEALTH_FACTOR
        assert is_healthy(MIN_HEALTH_FACTOR)

    def test_below_minimum(self):
        # 10 ETH at $18 = $180 against 100 debt -> 0.9
        hf = health_factor(180 * E18, 100 * E18)
        assert hf == 9 * 10**17
        assert not is_healthy(hf)

    def test_custom_threshold(self):
        assert health_factor(200 * E18, 100 * E18, threshold_pct=80) == 16 * 10**17

    def test_threshold_adjusted_truncates(self):
        assert threshold_adjusted(3, 50) == 1


class TestLiquidationBonus:
    def test_ten_percent(self):
        assert liquidation_bonus(5 * E18) == 5 * 10**17

    def test_truncates(self):
        assert liquidation_bonus(9) == 0
