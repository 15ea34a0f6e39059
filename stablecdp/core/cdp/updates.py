"""State transition functions for the CDP engine.

One pure function per primitive action. Each returns a new `CdpState`:
- updates evaluate against the PRE-state,
- ledgers are copied before mutation (the input state is never touched),
- guards have already run, so table underflow here is an internal error.
"""

from __future__ import annotations

from dataclasses import replace

from .types import ActionParams, CdpState, EngineConfig
from .valuation import PriceSnapshot, liquidation_seizure


def apply_deposit_collateral(
    config: EngineConfig, state: CdpState, params: ActionParams, prices: PriceSnapshot,
) -> CdpState:
    collateral = state.collateral.copy()
    collateral.add(params.account, params.asset, params.amount)
    return replace(state, collateral=collateral)


def apply_redeem_collateral(
    config: EngineConfig, state: CdpState, params: ActionParams, prices: PriceSnapshot,
) -> CdpState:
    collateral = state.collateral.copy()
    collateral.subtract(params.account, params.asset, params.amount)
    return replace(state, collateral=collateral)


def apply_mint(
    config: EngineConfig, state: CdpState, params: ActionParams, prices: PriceSnapshot,
) -> CdpState:
    debts = state.debts.copy()
    debts.add(params.account, params.amount)
    return replace(state, debts=debts)


def apply_burn(
    config: EngineConfig, state: CdpState, params: ActionParams, prices: PriceSnapshot,
) -> CdpState:
    debts = state.debts.copy()
    debts.add(params.account, -params.amount)
    return replace(state, debts=debts)


def apply_liquidate(
    config: EngineConfig, state: CdpState, params: ActionParams, prices: PriceSnapshot,
) -> CdpState:
    equivalent, bonus = liquidation_seizure(config, state, prices, params.asset, params.amount)
    collateral = state.collateral.copy()
    collateral.subtract(params.target, params.asset, equivalent + bonus)
    debts = state.debts.copy()
    debts.add(params.target, -params.amount)
    return replace(state, collateral=collateral, debts=debts)


def apply_set_exchange_rate(
    config: EngineConfig, state: CdpState, params: ActionParams, prices: PriceSnapshot,
) -> CdpState:
    return replace(state, exchange_rate=params.amount)
