"""Data types for the CDP engine core.

State, params, effects and results are frozen dataclasses. The ledgers inside
`CdpState` are mutable tables, but the core only ever mutates copies of them.

Units/conventions:
- collateral amounts are asset-native integer units,
- `debt`, pegged values and health factors are 18-decimal fixed point,
- `exchange_rate` is an integer "pegged units per reference unit",
- `*_pct` risk parameters are whole percents (1/100).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Sequence

from ...state.collateral import CollateralTable, DebtTable
from .errors import CdpError, ConfigurationMismatchError
from .math import (
    LIQUIDATION_BONUS_PCT,
    LIQUIDATION_THRESHOLD_PCT,
    MIN_HEALTH_FACTOR,
)


@unique
class Action(Enum):
    DEPOSIT_COLLATERAL = "deposit_collateral"
    REDEEM_COLLATERAL = "redeem_collateral"
    MINT = "mint"
    BURN = "burn"
    DEPOSIT_COLLATERAL_AND_MINT = "deposit_collateral_and_mint"
    REDEEM_AND_BURN = "redeem_and_burn"
    LIQUIDATE = "liquidate"
    SET_EXCHANGE_RATE = "set_exchange_rate"


@unique
class Event(Enum):
    COLLATERAL_DEPOSITED = "CollateralDeposited"
    COLLATERAL_REDEEMED = "CollateralRedeemed"
    PEGGED_MINTED = "PeggedMinted"
    PEGGED_BURNED = "PeggedBurned"
    LIQUIDATED = "Liquidated"
    EXCHANGE_RATE_UPDATED = "ExchangeRateUpdated"


@unique
class PeggedInversion(Enum):
    """How pegged value is converted back to an asset amount."""
    EXACT = "exact"
    LEGACY = "legacy"


@dataclass(frozen=True)
class CollateralAsset:
    """An accepted collateral token and the feed that prices it."""

    asset_id: str
    feed_id: str


@dataclass(frozen=True)
class EngineConfig:
    """Static engine configuration, fixed at construction."""

    assets: tuple[CollateralAsset, ...]
    admin: str = ""
    initial_exchange_rate: int = 1
    liquidation_threshold_pct: int = LIQUIDATION_THRESHOLD_PCT
    liquidation_bonus_pct: int = LIQUIDATION_BONUS_PCT
    min_health_factor: int = MIN_HEALTH_FACTOR
    max_price_age_seconds: int | None = None
    pegged_inversion: PeggedInversion = PeggedInversion.EXACT

    def __post_init__(self) -> None:
        if not self.assets:
            raise ConfigurationMismatchError("at least one collateral asset is required")
        ids = [a.asset_id for a in self.assets]
        if len(set(ids)) != len(ids):
            raise ConfigurationMismatchError("duplicate collateral asset", assets=ids)
        if self.initial_exchange_rate <= 0:
            raise ConfigurationMismatchError("exchange rate must be positive", rate=self.initial_exchange_rate)
        if not 0 < self.liquidation_threshold_pct <= 100:
            raise ConfigurationMismatchError(
                "liquidation threshold must be in (0, 100]", pct=self.liquidation_threshold_pct,
            )
        if self.liquidation_bonus_pct < 0:
            raise ConfigurationMismatchError("liquidation bonus must be non-negative", pct=self.liquidation_bonus_pct)
        if self.min_health_factor <= 0:
            raise ConfigurationMismatchError("min health factor must be positive", value=self.min_health_factor)
        if self.max_price_age_seconds is not None and self.max_price_age_seconds <= 0:
            raise ConfigurationMismatchError(
                "max price age must be positive", seconds=self.max_price_age_seconds,
            )

    @classmethod
    def from_lists(
        cls,
        asset_ids: Sequence[str],
        feed_ids: Sequence[str],
        **kwargs,
    ) -> "EngineConfig":
        """Pair parallel asset/feed lists; mismatched lengths are rejected."""
        if len(asset_ids) != len(feed_ids):
            raise ConfigurationMismatchError(
                "asset and price feed lists must be the same length",
                assets=len(asset_ids), feeds=len(feed_ids),
            )
        assets = tuple(CollateralAsset(a, f) for a, f in zip(asset_ids, feed_ids))
        return cls(assets=assets, **kwargs)

    @property
    def asset_ids(self) -> tuple[str, ...]:
        return tuple(a.asset_id for a in self.assets)

    def feed_for(self, asset_id: str) -> str | None:
        for a in self.assets:
            if a.asset_id == asset_id:
                return a.feed_id
        return None

    def is_supported(self, asset_id: str) -> bool:
        return self.feed_for(asset_id) is not None


@dataclass(frozen=True)
class CdpState:
    """Complete engine-owned state: collateral ledger, debt map, exchange rate."""

    collateral: CollateralTable = field(default_factory=CollateralTable)
    debts: DebtTable = field(default_factory=DebtTable)
    exchange_rate: int = 1


@dataclass(frozen=True)
class ActionParams:
    """Parameters for an action. Unused fields default to ""/0.

    `account` is always the caller: the depositor/minter for account
    operations, the liquidator for `LIQUIDATE`, the admin for
    `SET_EXCHANGE_RATE`.
    """

    action: Action
    account: str = ""
    asset: str = ""
    amount: int = 0          # collateral amount; debt_to_cover for liquidate; new rate
    debt_amount: int = 0     # mint/burn amount of the compound actions
    target: str = ""         # liquidate


@dataclass(frozen=True)
class Effect:
    """Post-state observable of one applied sub-operation."""

    event: Event
    account: str
    asset: str = ""
    amount: int = 0
    target: str = ""
    collateral_seized: int = 0
    bonus: int = 0
    health_factor: int = 0
    exchange_rate: int = 0


@dataclass(frozen=True)
class StepResult:
    """Result of a single engine step."""

    accepted: bool
    state: CdpState | None = None
    effects: tuple[Effect, ...] = ()
    rejection: str | None = None
    error: CdpError | None = None
