"""Dispatch-table engine for the CDP core.

``step(config, state, params, prices)`` is the single entry point. It:

1. Expands compound actions into their primitive sub-actions.
2. Runs guard + update for each primitive against a working state.
3. Checks state-wide invariants on the final state.
4. Checks health factors of the touched accounts (and, for liquidation,
   that the target strictly improved).
5. Returns a ``StepResult`` (accepted with effects, or rejected with the error).

Nothing is committed on rejection: the input state is never mutated, so the
caller simply keeps it.
"""

from __future__ import annotations

from typing import Callable

from .effects import (
    effect_burn,
    effect_deposit_collateral,
    effect_liquidate,
    effect_mint,
    effect_redeem_collateral,
    effect_set_exchange_rate,
)
from .errors import (
    CdpError,
    CdpInvariantError,
    HealthFactorViolationError,
    LiquidationIneffectiveError,
)
from .guards import (
    guard_burn,
    guard_deposit_collateral,
    guard_liquidate,
    guard_mint,
    guard_redeem_collateral,
    guard_set_exchange_rate,
)
from .invariants import check_all, unhealthy_accounts
from .types import Action, ActionParams, CdpState, Effect, EngineConfig, StepResult
from .updates import (
    apply_burn,
    apply_deposit_collateral,
    apply_liquidate,
    apply_mint,
    apply_redeem_collateral,
    apply_set_exchange_rate,
)
from .valuation import PriceSnapshot, account_health_factor

GuardFn = Callable[[EngineConfig, CdpState, ActionParams, PriceSnapshot], "CdpError | None"]
UpdateFn = Callable[[EngineConfig, CdpState, ActionParams, PriceSnapshot], CdpState]
EffectFn = Callable[[EngineConfig, CdpState, ActionParams, PriceSnapshot], Effect]

_DISPATCH: dict[Action, tuple[GuardFn, UpdateFn, EffectFn]] = {
    Action.DEPOSIT_COLLATERAL: (
        guard_deposit_collateral, apply_deposit_collateral, effect_deposit_collateral,
    ),
    Action.REDEEM_COLLATERAL: (
        guard_redeem_collateral, apply_redeem_collateral, effect_redeem_collateral,
    ),
    Action.MINT: (
        guard_mint, apply_mint, effect_mint,
    ),
    Action.BURN: (
        guard_burn, apply_burn, effect_burn,
    ),
    Action.LIQUIDATE: (
        guard_liquidate, apply_liquidate, effect_liquidate,
    ),
    Action.SET_EXCHANGE_RATE: (
        guard_set_exchange_rate, apply_set_exchange_rate, effect_set_exchange_rate,
    ),
}

# Primitives whose caller must end the step with debt == 0 or a healthy position.
_HEALTH_CHECKED: frozenset[Action] = frozenset({
    Action.REDEEM_COLLATERAL,
    Action.MINT,
    Action.BURN,
})


def expand(params: ActionParams) -> list[ActionParams]:
    """Split a compound action into primitives, in execution order."""
    if params.action is Action.DEPOSIT_COLLATERAL_AND_MINT:
        return [
            ActionParams(Action.DEPOSIT_COLLATERAL, account=params.account, asset=params.asset, amount=params.amount),
            ActionParams(Action.MINT, account=params.account, amount=params.debt_amount),
        ]
    if params.action is Action.REDEEM_AND_BURN:
        # Burn first so the redeem is valued against the reduced debt.
        return [
            ActionParams(Action.BURN, account=params.account, amount=params.debt_amount),
            ActionParams(Action.REDEEM_COLLATERAL, account=params.account, asset=params.asset, amount=params.amount),
        ]
    return [params]


def _post_check(
    config: EngineConfig,
    pre: CdpState,
    post: CdpState,
    params: ActionParams,
    primitives: list[ActionParams],
    prices: PriceSnapshot,
) -> CdpError | None:
    if params.action is Action.LIQUIDATE:
        before = account_health_factor(config, pre, prices, params.target)
        after = account_health_factor(config, post, prices, params.target)
        if after <= before:
            return LiquidationIneffectiveError(params.target, before, after)
        broken = unhealthy_accounts(config, post, prices, [params.account])
        if broken:
            return HealthFactorViolationError(*broken[0])
        return None

    touched = sorted({p.account for p in primitives if p.action in _HEALTH_CHECKED})
    broken = unhealthy_accounts(config, post, prices, touched)
    if broken:
        return HealthFactorViolationError(*broken[0])
    return None


def _reject(error: CdpError) -> StepResult:
    return StepResult(accepted=False, rejection=error.code, error=error)


def step(
    config: EngineConfig,
    state: CdpState,
    params: ActionParams,
    prices: PriceSnapshot,
) -> StepResult:
    """Execute one action against the given state.

    Returns ``StepResult`` with ``accepted=True`` and the new state on success,
    or ``accepted=False`` with the rejecting ``CdpError``.
    """
    primitives = expand(params)
    for p in primitives:
        if p.action not in _DISPATCH:
            raise ValueError(f"unknown action: {p.action}")

    try:
        working = state
        effects: list[Effect] = []
        for p in primitives:
            guard_fn, update_fn, effect_fn = _DISPATCH[p.action]
            err = guard_fn(config, working, p, prices)
            if err is not None:
                return _reject(err)
            working = update_fn(config, working, p, prices)
            effects.append(effect_fn(config, working, p, prices))

        violations = check_all(working)
        if violations:
            return _reject(CdpInvariantError(violations))

        err = _post_check(config, state, working, params, primitives, prices)
        if err is not None:
            return _reject(err)
    except CdpError as exc:
        return _reject(exc)

    return StepResult(accepted=True, state=working, effects=tuple(effects))


def step_or_raise(
    config: EngineConfig,
    state: CdpState,
    params: ActionParams,
    prices: PriceSnapshot,
) -> StepResult:
    """Like ``step()`` but raises the rejecting ``CdpError`` instead of returning it."""
    result = step(config, state, params, prices)
    if result.accepted:
        return result
    assert result.error is not None
    raise result.error
