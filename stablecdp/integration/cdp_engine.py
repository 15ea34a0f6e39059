"""
CDP engine shell: applies core steps to live collaborators.

The functional core (`stablecdp.core.cdp`) decides every state transition
against an immutable price snapshot. This shell owns the mutable pieces:
- reads one price snapshot per operation (optionally fail-closed on stale quotes),
- runs the core step on a working copy of the ledger,
- turns the step's effects into token movements, recording an undo for each,
- commits the new state only when every movement succeeded; otherwise undoes
  the movements already made, in reverse order, and re-raises.

Operations are serialized by a lock; same-thread reentry (e.g. from a token
callback during a transfer) is rejected with `ReentrancyError`.
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator, List, Mapping, Optional, Sequence, Tuple

from ..core.cdp import (
    Action,
    ActionParams,
    CdpError,
    CdpState,
    ConfigurationMismatchError,
    Effect,
    EngineConfig,
    Event,
    PriceSnapshot,
    ReentrancyError,
    StepResult,
    TransferFailedError,
    initial_state,
    step_or_raise,
)
from ..core.cdp import math as cdp_math
from ..core.cdp import valuation
from ..core.oracle import FreshnessPolicy, require_fresh
from .interfaces import CollateralToken, PeggedToken, PriceFeed

logger = logging.getLogger(__name__)

DEFAULT_ENGINE_ADDRESS = "cdp-engine"


class _UndoJournal:
    """Compensating actions for token movements made during one attempt."""

    def __init__(self) -> None:
        self._undo: List[Tuple[str, Callable[[], object]]] = []

    def record(self, label: str, undo: Callable[[], object]) -> None:
        self._undo.append((label, undo))

    def rollback(self) -> None:
        while self._undo:
            label, undo = self._undo.pop()
            try:
                result = undo()
            except Exception:
                logger.exception("compensation failed: %s", label)
                continue
            if result is False:
                logger.error("compensation reported failure: %s", label)


class CdpEngine:
    """Stateful engine bound to its token and price-feed collaborators."""

    def __init__(
        self,
        config: EngineConfig,
        *,
        pegged_token: PeggedToken,
        collateral_tokens: Mapping[str, CollateralToken],
        price_feeds: Mapping[str, PriceFeed],
        address: str = DEFAULT_ENGINE_ADDRESS,
        clock: Callable[[], float] = time.time,
        state: Optional[CdpState] = None,
    ):
        missing_tokens = [a for a in config.asset_ids if a not in collateral_tokens]
        if missing_tokens:
            raise ConfigurationMismatchError("no token for collateral asset", assets=missing_tokens)
        missing_feeds = [a.feed_id for a in config.assets if a.feed_id not in price_feeds]
        if missing_feeds:
            raise ConfigurationMismatchError("no price feed for collateral asset", feeds=missing_feeds)

        self.config = config
        self.address = address
        self._pegged = pegged_token
        self._tokens = {a: collateral_tokens[a] for a in config.asset_ids}
        self._feeds = {a.asset_id: price_feeds[a.feed_id] for a in config.assets}
        self._clock = clock
        self._freshness = FreshnessPolicy(config.max_price_age_seconds)
        self._state = state if state is not None else initial_state(config)
        self._lock = threading.Lock()
        self._owner: Optional[int] = None
        self.events: List[Effect] = []

    @classmethod
    def from_lists(
        cls,
        asset_ids: Sequence[str],
        feed_ids: Sequence[str],
        *,
        pegged_token: PeggedToken,
        collateral_tokens: Mapping[str, CollateralToken],
        price_feeds: Mapping[str, PriceFeed],
        address: str = DEFAULT_ENGINE_ADDRESS,
        clock: Callable[[], float] = time.time,
        **config_kwargs,
    ) -> "CdpEngine":
        """Build from parallel asset/feed lists; mismatched lengths fail before any wiring."""
        config = EngineConfig.from_lists(asset_ids, feed_ids, **config_kwargs)
        return cls(
            config,
            pegged_token=pegged_token,
            collateral_tokens=collateral_tokens,
            price_feeds=price_feeds,
            address=address,
            clock=clock,
        )

    # ------------------------------------------------------------------
    # Account operations
    # ------------------------------------------------------------------

    def deposit_collateral(self, account: str, asset: str, amount: int) -> StepResult:
        return self._execute(ActionParams(Action.DEPOSIT_COLLATERAL, account=account, asset=asset, amount=amount))

    def redeem_collateral(self, account: str, asset: str, amount: int) -> StepResult:
        return self._execute(ActionParams(Action.REDEEM_COLLATERAL, account=account, asset=asset, amount=amount))

    def mint(self, account: str, amount: int) -> StepResult:
        return self._execute(ActionParams(Action.MINT, account=account, amount=amount))

    def burn(self, account: str, amount: int) -> StepResult:
        return self._execute(ActionParams(Action.BURN, account=account, amount=amount))

    def deposit_collateral_and_mint(
        self, account: str, asset: str, collateral_amount: int, mint_amount: int,
    ) -> StepResult:
        return self._execute(ActionParams(
            Action.DEPOSIT_COLLATERAL_AND_MINT,
            account=account, asset=asset, amount=collateral_amount, debt_amount=mint_amount,
        ))

    def redeem_and_burn(
        self, account: str, asset: str, collateral_amount: int, burn_amount: int,
    ) -> StepResult:
        return self._execute(ActionParams(
            Action.REDEEM_AND_BURN,
            account=account, asset=asset, amount=collateral_amount, debt_amount=burn_amount,
        ))

    def liquidate(self, liquidator: str, asset: str, target: str, debt_to_cover: int) -> StepResult:
        return self._execute(ActionParams(
            Action.LIQUIDATE, account=liquidator, asset=asset, target=target, amount=debt_to_cover,
        ))

    # ------------------------------------------------------------------
    # Administrative surface
    # ------------------------------------------------------------------

    def set_exchange_rate(self, caller: str, new_rate: int) -> StepResult:
        return self._execute(ActionParams(Action.SET_EXCHANGE_RATE, account=caller, amount=new_rate))

    # ------------------------------------------------------------------
    # Read-only accessors (never fail for any account)
    # ------------------------------------------------------------------

    @property
    def state(self) -> CdpState:
        return self._state

    def get_health_factor(self, account: str) -> int:
        return valuation.account_health_factor(self.config, self._state, self._snapshot(enforce_freshness=False), account)

    def get_account_collateral_value(self, account: str) -> int:
        return valuation.collateral_value(self.config, self._state, self._snapshot(enforce_freshness=False), account)

    def get_account_information(self, account: str) -> Tuple[int, int]:
        """(debt, collateral value in pegged units)."""
        return self._state.debts.get(account), self.get_account_collateral_value(account)

    def get_collateral_balance(self, account: str, asset: str) -> int:
        return self._state.collateral.get(account, asset)

    def get_debt(self, account: str) -> int:
        return self._state.debts.get(account)

    def get_collateral_assets(self) -> Tuple[str, ...]:
        return self.config.asset_ids

    def get_price_feed(self, asset: str) -> Optional[str]:
        return self.config.feed_for(asset)

    def get_exchange_rate(self) -> int:
        return self._state.exchange_rate

    def get_reference_value(self, asset: str, amount: int) -> int:
        return valuation.reference_value(self._snapshot(enforce_freshness=False), asset, amount)

    def get_pegged_value(self, asset: str, amount: int) -> int:
        return valuation.pegged_value(
            self._snapshot(enforce_freshness=False), asset, amount, self._state.exchange_rate,
        )

    def get_asset_amount_from_reference_value(self, asset: str, value: int) -> int:
        return valuation.asset_amount_from_reference_value(self._snapshot(enforce_freshness=False), asset, value)

    def get_asset_amount_from_pegged_value(self, asset: str, value: int) -> int:
        return valuation.asset_amount_from_pegged_value(
            self._snapshot(enforce_freshness=False), asset, value,
            self._state.exchange_rate, self.config.pegged_inversion,
        )

    @property
    def precision(self) -> int:
        return cdp_math.PRECISION

    @property
    def liquidation_threshold(self) -> int:
        return self.config.liquidation_threshold_pct

    @property
    def liquidation_bonus(self) -> int:
        return self.config.liquidation_bonus_pct

    @property
    def min_health_factor(self) -> int:
        return self.config.min_health_factor

    def total_debt(self) -> int:
        return self._state.debts.total()

    def is_solvent(self) -> bool:
        return valuation.is_system_solvent(self.config, self._state, self._snapshot(enforce_freshness=False))

    def verify_custody(self) -> bool:
        """Every asset's recorded deposits are covered by tokens the engine holds."""
        return all(
            self._state.collateral.total_for_asset(asset) <= token.balance_of(self.address)
            for asset, token in self._tokens.items()
        )

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    @contextmanager
    def _non_reentrant(self) -> Iterator[None]:
        if self._owner == threading.get_ident():
            raise ReentrancyError("nested call into a state-changing operation")
        with self._lock:
            self._owner = threading.get_ident()
            try:
                yield
            finally:
                self._owner = None

    def _snapshot(self, *, enforce_freshness: bool = True) -> PriceSnapshot:
        quotes = {}
        unavailable = {}
        now = int(self._clock())
        for asset, feed in self._feeds.items():
            quote = feed.latest_round_data()
            if enforce_freshness:
                try:
                    require_fresh(self._freshness, asset, quote, now)
                except CdpError as exc:
                    unavailable[asset] = exc
                    continue
            quotes[asset] = quote
        return PriceSnapshot(quotes, unavailable)

    def _execute(self, params: ActionParams) -> StepResult:
        with self._non_reentrant():
            try:
                result = step_or_raise(self.config, self._state, params, self._snapshot())
            except CdpError as exc:
                logger.warning("%s rejected for %s: %s", params.action.value, params.account, exc)
                raise

            journal = _UndoJournal()
            try:
                for effect in result.effects:
                    self._settle(effect, journal)
            except CdpError as exc:
                logger.warning("%s settlement failed for %s: %s", params.action.value, params.account, exc)
                journal.rollback()
                raise
            except Exception as exc:
                logger.warning("%s settlement failed for %s: %r", params.action.value, params.account, exc)
                journal.rollback()
                raise TransferFailedError(
                    "collaborator raised during settlement", action=params.action.value,
                ) from exc

            assert result.state is not None
            self._state = result.state
            self.events.extend(result.effects)
            logger.info(
                "%s committed for %s (%d effects)", params.action.value, params.account, len(result.effects),
            )
            return result

    def _settle(self, effect: Effect, journal: _UndoJournal) -> None:
        if effect.event is Event.COLLATERAL_DEPOSITED:
            self._pull(self._tokens[effect.asset], effect.account, effect.amount, journal, effect.asset)
        elif effect.event is Event.COLLATERAL_REDEEMED:
            self._push(self._tokens[effect.asset], effect.account, effect.amount, journal, effect.asset)
        elif effect.event is Event.PEGGED_MINTED:
            self._mint(effect.account, effect.amount, journal)
        elif effect.event is Event.PEGGED_BURNED:
            self._pull_and_burn(effect.account, effect.amount, journal)
        elif effect.event is Event.LIQUIDATED:
            self._pull_and_burn(effect.account, effect.amount, journal)
            self._push(self._tokens[effect.asset], effect.account, effect.collateral_seized, journal, effect.asset)
        elif effect.event is Event.EXCHANGE_RATE_UPDATED:
            logger.info("exchange rate set to %d by %s", effect.exchange_rate, effect.account)

    def _pull(self, token: CollateralToken, owner: str, amount: int, journal: _UndoJournal, label: str) -> None:
        if not token.transfer_from(self.address, owner, self.address, amount):
            raise TransferFailedError("inbound transfer failed", asset=label, account=owner, amount=amount)
        journal.record(f"return {amount} {label} to {owner}", lambda: token.transfer(self.address, owner, amount))

    def _push(self, token: CollateralToken, to: str, amount: int, journal: _UndoJournal, label: str) -> None:
        if amount == 0:
            return
        if not token.transfer(self.address, to, amount):
            raise TransferFailedError("outbound transfer failed", asset=label, account=to, amount=amount)
        journal.record(
            f"reclaim {amount} {label} from {to}",
            lambda: token.transfer_from(self.address, to, self.address, amount),
        )

    def _mint(self, to: str, amount: int, journal: _UndoJournal) -> None:
        if not self._pegged.mint(self.address, to, amount):
            raise TransferFailedError("mint failed", account=to, amount=amount)
        journal.record(f"reclaim minted {amount} from {to}", lambda: self._reclaim_minted(to, amount))

    def _reclaim_minted(self, holder: str, amount: int) -> None:
        if not self._pegged.transfer_from(self.address, holder, self.address, amount):
            raise TransferFailedError("could not reclaim minted currency", account=holder, amount=amount)
        self._pegged.burn(self.address, amount)

    def _pull_and_burn(self, payer: str, amount: int, journal: _UndoJournal) -> None:
        self._pull(self._pegged, payer, amount, journal, "pegged")
        self._pegged.burn(self.address, amount)
        journal.record(f"re-mint {amount} burned", lambda: self._pegged.mint(self.address, self.address, amount))
