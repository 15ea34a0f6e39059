"""Guard functions for the CDP engine.

One pure function per primitive action. Each inspects the PRE-state and the
parameters and returns the `CdpError` that rejects the action, or None when the
action may proceed. Health-factor checks on the POST-state live in
`invariants.py`.
"""

from __future__ import annotations

from .errors import (
    CdpError,
    InsufficientCollateralError,
    InsufficientDebtError,
    InvalidAmountError,
    PositionIsHealthyError,
    UnauthorizedError,
    UnsupportedAssetError,
)
from .math import is_healthy
from .types import ActionParams, CdpState, EngineConfig
from .valuation import PriceSnapshot, account_health_factor, liquidation_seizure


def _positive(value: int, field: str) -> CdpError | None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return InvalidAmountError("amount must be positive", field=field, value=value)
    return None


def _supported(config: EngineConfig, asset: str) -> CdpError | None:
    if not config.is_supported(asset):
        return UnsupportedAssetError("asset is not accepted collateral", asset=asset)
    return None


def guard_deposit_collateral(
    config: EngineConfig, state: CdpState, params: ActionParams, prices: PriceSnapshot,
) -> CdpError | None:
    return _positive(params.amount, "amount") or _supported(config, params.asset)


def guard_redeem_collateral(
    config: EngineConfig, state: CdpState, params: ActionParams, prices: PriceSnapshot,
) -> CdpError | None:
    err = _positive(params.amount, "amount") or _supported(config, params.asset)
    if err is not None:
        return err
    deposited = state.collateral.get(params.account, params.asset)
    if params.amount > deposited:
        return InsufficientCollateralError(
            account=params.account, asset=params.asset, deposited=deposited, requested=params.amount,
        )
    return None


def guard_mint(
    config: EngineConfig, state: CdpState, params: ActionParams, prices: PriceSnapshot,
) -> CdpError | None:
    return _positive(params.amount, "amount")


def guard_burn(
    config: EngineConfig, state: CdpState, params: ActionParams, prices: PriceSnapshot,
) -> CdpError | None:
    err = _positive(params.amount, "amount")
    if err is not None:
        return err
    debt = state.debts.get(params.account)
    if params.amount > debt:
        return InsufficientDebtError(account=params.account, debt=debt, requested=params.amount)
    return None


def guard_liquidate(
    config: EngineConfig, state: CdpState, params: ActionParams, prices: PriceSnapshot,
) -> CdpError | None:
    hf = account_health_factor(config, state, prices, params.target)
    if is_healthy(hf, config.min_health_factor):
        return PositionIsHealthyError(params.target, hf)

    err = _positive(params.amount, "debt_to_cover") or _supported(config, params.asset)
    if err is not None:
        return err

    debt = state.debts.get(params.target)
    if params.amount > debt:
        return InsufficientDebtError(account=params.target, debt=debt, requested=params.amount)

    equivalent, bonus = liquidation_seizure(config, state, prices, params.asset, params.amount)
    deposited = state.collateral.get(params.target, params.asset)
    if equivalent + bonus > deposited:
        return InsufficientCollateralError(
            account=params.target, asset=params.asset, deposited=deposited, requested=equivalent + bonus,
        )
    return None


def guard_set_exchange_rate(
    config: EngineConfig, state: CdpState, params: ActionParams, prices: PriceSnapshot,
) -> CdpError | None:
    if not config.admin or params.account != config.admin:
        return UnauthorizedError("only the admin may set the exchange rate", caller=params.account)
    return _positive(params.amount, "exchange_rate")
