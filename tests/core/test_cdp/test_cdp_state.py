"""Tests for stablecdp/core/cdp/state.py and EngineConfig construction."""

import json

import pytest

from stablecdp.core.cdp import (
    CdpState,
    CollateralAsset,
    ConfigurationMismatchError,
    EngineConfig,
    initial_state,
    state_from_dict,
    state_to_dict,
)

E18 = 10**18


class TestInitialState:
    def test_empty(self):
        config = EngineConfig(assets=(CollateralAsset("weth", "eth-usd"),), initial_exchange_rate=90)
        s = initial_state(config)
        assert s.exchange_rate == 90
        assert list(s.collateral.items()) == []
        assert s.debts.total() == 0

    def test_defaults_equal(self):
        assert CdpState() == CdpState()


class TestSerialization:
    def test_round_trip_through_json(self):
        s = CdpState(exchange_rate=90)
        s.collateral.set("bob", "weth", 3 * E18)
        s.collateral.set("alice", "wbtc", E18)
        s.debts.set("alice", 500 * E18)
        encoded = json.dumps(state_to_dict(s))
        assert state_from_dict(json.loads(encoded)) == s

    def test_sorted_output(self):
        s = CdpState()
        s.collateral.set("bob", "weth", 1)
        s.collateral.set("alice", "weth", 2)
        accounts = [e["account"] for e in state_to_dict(s)["collateral"]]
        assert accounts == ["alice", "bob"]

    def test_missing_field(self):
        with pytest.raises(KeyError):
            state_from_dict({"collateral": [], "debts": []})

    def test_bool_rejected(self):
        with pytest.raises(TypeError):
            state_from_dict({"collateral": [], "debts": [], "exchange_rate": True})


class TestEngineConfig:
    def test_from_lists(self):
        config = EngineConfig.from_lists(["weth", "wbtc"], ["eth-usd", "btc-usd"])
        assert config.asset_ids == ("weth", "wbtc")
        assert config.feed_for("wbtc") == "btc-usd"
        assert config.feed_for("doge") is None

    def test_mismatched_lengths(self):
        with pytest.raises(ConfigurationMismatchError) as exc_info:
            EngineConfig.from_lists(["weth", "wbtc"], ["eth-usd"])
        assert exc_info.value.context == {"assets": 2, "feeds": 1}

    def test_empty(self):
        with pytest.raises(ConfigurationMismatchError):
            EngineConfig(assets=())

    def test_duplicate_asset(self):
        with pytest.raises(ConfigurationMismatchError):
            EngineConfig.from_lists(["weth", "weth"], ["a", "b"])

    @pytest.mark.parametrize("kwargs", [
        {"initial_exchange_rate": 0},
        {"liquidation_threshold_pct": 0},
        {"liquidation_threshold_pct": 101},
        {"liquidation_bonus_pct": -1},
        {"min_health_factor": 0},
        {"max_price_age_seconds": 0},
    ])
    def test_invalid_parameters(self, kwargs):
        with pytest.raises(ConfigurationMismatchError):
            EngineConfig(assets=(CollateralAsset("weth", "eth-usd"),), **kwargs)
