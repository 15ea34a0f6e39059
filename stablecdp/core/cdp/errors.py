"""Exception types for the CDP engine.

The pure core reports failures as ``StepResult(accepted=False, error=...)``;
``step_or_raise()`` in ``engine.py`` and the ``CdpEngine`` shell raise them.
Every error carries a stable ``code`` plus keyword context (offending asset,
computed health factor, ...) for off-engine tooling.
"""

from __future__ import annotations

from typing import Any


class CdpError(Exception):
    """Base class for every engine rejection."""

    code: str = "cdp_error"

    def __init__(self, message: str = "", **context: Any) -> None:
        self.context = context
        detail = ", ".join(f"{k}={v!r}" for k, v in sorted(context.items()))
        text = message or self.code
        super().__init__(f"{text} ({detail})" if detail else text)


class InvalidAmountError(CdpError):
    """Raised when a strictly positive amount is required."""

    code = "invalid_amount"


class UnsupportedAssetError(CdpError):
    """Raised when an asset is not in the accepted collateral set."""

    code = "unsupported_asset"


class TransferFailedError(CdpError):
    """Raised when a collateral or pegged-currency transfer reports failure."""

    code = "transfer_failed"


class InsufficientCollateralError(CdpError):
    code = "insufficient_collateral"


class InsufficientDebtError(CdpError):
    code = "insufficient_debt"


class HealthFactorViolationError(CdpError):
    """Raised when an operation would leave debt with health factor below minimum."""

    code = "health_factor_violation"

    def __init__(self, account: str, health_factor: int) -> None:
        self.account = account
        self.health_factor = health_factor
        super().__init__("health factor below minimum", account=account, health_factor=health_factor)


class PositionIsHealthyError(CdpError):
    """Raised when liquidation targets an account at or above the minimum."""

    code = "position_is_healthy"

    def __init__(self, account: str, health_factor: int) -> None:
        self.account = account
        self.health_factor = health_factor
        super().__init__("position is healthy", account=account, health_factor=health_factor)


class LiquidationIneffectiveError(CdpError):
    """Raised when liquidation does not strictly improve the target's health factor."""

    code = "liquidation_ineffective"

    def __init__(self, account: str, before: int, after: int) -> None:
        self.account = account
        self.before = before
        self.after = after
        super().__init__("liquidation did not improve health factor", account=account, before=before, after=after)


class ConfigurationMismatchError(CdpError):
    code = "configuration_mismatch"


class ReentrancyError(CdpError):
    """Raised on nested entry into a state-changing operation."""

    code = "reentrancy"


class UnauthorizedError(CdpError):
    code = "unauthorized"


class StalePriceError(CdpError):
    """Raised when a price quote is outside the configured freshness window."""

    code = "stale_price"


class DivisionByZeroError(CdpError, ZeroDivisionError):
    """Raised when a conversion divides by a zero price or exchange rate."""

    code = "division_by_zero"


class CdpInvariantError(CdpError):
    """Raised when a post-state violates one or more state-wide invariants."""

    code = "invariant"

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")
