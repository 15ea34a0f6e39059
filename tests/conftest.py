"""Shared fixtures: a two-collateral engine wired to in-memory tokens and feeds."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from stablecdp.core.cdp import CollateralAsset, EngineConfig
from stablecdp.integration import CdpEngine, MintableToken, PeggedCurrency, StaticPriceFeed

E18 = 10**18
E8 = 10**8

ENGINE = "engine"
ADMIN = "admin"
USER = "alice"
LIQUIDATOR = "liquidator"
WETH = "weth"
WBTC = "wbtc"
ETH_FEED = "eth-usd"
BTC_FEED = "btc-usd"

ETH_PRICE = 2000
BTC_PRICE = 1000
STARTING_BALANCE = 10 * E18


@dataclass
class Env:
    engine: CdpEngine
    weth: MintableToken
    wbtc: MintableToken
    pegged: PeggedCurrency
    eth_feed: StaticPriceFeed
    btc_feed: StaticPriceFeed

    def fund(self, account: str, amount: int = STARTING_BALANCE, token: str = WETH) -> None:
        """Give `account` collateral tokens and approve the engine to pull them."""
        tok = self.weth if token == WETH else self.wbtc
        tok.mint(account, amount)
        tok.approve(account, ENGINE, tok.allowance(account, ENGINE) + amount)

    def approve_pegged(self, account: str, amount: int) -> None:
        self.pegged.approve(account, ENGINE, amount)


def make_config(**kwargs) -> EngineConfig:
    kwargs.setdefault("admin", ADMIN)
    return EngineConfig(
        assets=(CollateralAsset(WETH, ETH_FEED), CollateralAsset(WBTC, BTC_FEED)),
        **kwargs,
    )


def make_env(clock=None, **config_kwargs) -> Env:
    weth = MintableToken("WETH")
    wbtc = MintableToken("WBTC")
    pegged = PeggedCurrency("PEG", owner=ENGINE)
    eth_feed = StaticPriceFeed(ETH_PRICE * E8)
    btc_feed = StaticPriceFeed(BTC_PRICE * E8)
    extra = {} if clock is None else {"clock": clock}
    engine = CdpEngine(
        make_config(**config_kwargs),
        pegged_token=pegged,
        collateral_tokens={WETH: weth, WBTC: wbtc},
        price_feeds={ETH_FEED: eth_feed, BTC_FEED: btc_feed},
        address=ENGINE,
        **extra,
    )
    return Env(engine, weth, wbtc, pegged, eth_feed, btc_feed)


@pytest.fixture
def env() -> Env:
    e = make_env()
    e.fund(USER)
    return e
