"""Pure fixed-point arithmetic for the CDP engine.

Every function is stateless and operates on plain non-negative Python ints.

Rounding: Python's `//` on non-negative operands truncates toward zero, which is
the only rounding mode the engine uses. Pegged-currency amounts and health
factors are 18-decimal fixed point (`PRECISION`).
"""

from __future__ import annotations

from .errors import DivisionByZeroError

# Fixed-point constants
PRECISION: int = 10**18
PRECISION_DECIMALS: int = 18
DEFAULT_FEED_DECIMALS: int = 8
ADDITIONAL_FEED_PRECISION: int = 10**10  # 8-decimal feed -> 18 decimals
PERCENT_SCALE: int = 100

# Risk parameters (defaults; EngineConfig may override threshold/bonus)
LIQUIDATION_THRESHOLD_PCT: int = 50
LIQUIDATION_BONUS_PCT: int = 10
MIN_HEALTH_FACTOR: int = PRECISION
MAX_HEALTH_FACTOR: int = 2**256 - 1


# -- Price normalization -----------------------------------------------------

def normalize_price(price: int, decimals: int = DEFAULT_FEED_DECIMALS) -> int:
    """Scale a feed price with `decimals` decimals to 18 decimals."""
    if price < 0:
        raise ValueError(f"price must be non-negative: {price}")
    if decimals <= PRECISION_DECIMALS:
        return price * 10 ** (PRECISION_DECIMALS - decimals)
    return price // 10 ** (decimals - PRECISION_DECIMALS)


# -- Conversion ----------------------------------------------------------------

def reference_value(price_18: int, amount: int) -> int:
    """Reference-currency value: ``price * amount / 1e18``."""
    return (price_18 * amount) // PRECISION


def asset_amount_from_reference_value(price_18: int, value: int) -> int:
    """Asset-native amount worth `value` reference units: ``value * 1e18 / price``."""
    if price_18 == 0:
        raise DivisionByZeroError("zero price", price=price_18)
    return (value * PRECISION) // price_18


def pegged_value(price_18: int, amount: int, exchange_rate: int) -> int:
    """Pegged-currency value: ``reference_value * rate``."""
    return reference_value(price_18, amount) * exchange_rate


def asset_amount_from_pegged_value(price_18: int, value: int, exchange_rate: int) -> int:
    """Single multiply-then-divide inversion of `pegged_value`.

    Truncation error of ``asset_amount_from_pegged_value(p, pegged_value(p, a, r), r)``
    is bounded by ``1e18 / price + 1`` asset units below `a` and never above it.
    """
    if price_18 == 0 or exchange_rate == 0:
        raise DivisionByZeroError("zero price or exchange rate", price=price_18, exchange_rate=exchange_rate)
    return (value * PRECISION) // (price_18 * exchange_rate)


def legacy_asset_amount_from_pegged_value(price_18: int, value: int, exchange_rate: int) -> int:
    """Legacy ordering: divide by the rate, convert, then re-multiply by the rate.

    Kept bit-for-bit; the intermediate ``value // rate`` discards the remainder.
    """
    if exchange_rate == 0:
        raise DivisionByZeroError("zero exchange rate", exchange_rate=exchange_rate)
    return asset_amount_from_reference_value(price_18, value // exchange_rate) * exchange_rate


# -- Health factor -------------------------------------------------------------

def threshold_adjusted(collateral_value: int, threshold_pct: int = LIQUIDATION_THRESHOLD_PCT) -> int:
    """Share of collateral value that counts toward backing debt."""
    return (collateral_value * threshold_pct) // PERCENT_SCALE


def health_factor(
    collateral_value: int,
    debt: int,
    threshold_pct: int = LIQUIDATION_THRESHOLD_PCT,
) -> int:
    """``(collateral * threshold / 100) * 1e18 / debt``; zero debt is maximally healthy."""
    if debt == 0:
        return MAX_HEALTH_FACTOR
    return (threshold_adjusted(collateral_value, threshold_pct) * PRECISION) // debt


def is_healthy(hf: int, min_health_factor: int = MIN_HEALTH_FACTOR) -> bool:
    return hf >= min_health_factor


# -- Liquidation ---------------------------------------------------------------

def liquidation_bonus(collateral_equivalent: int, bonus_pct: int = LIQUIDATION_BONUS_PCT) -> int:
    """Bonus collateral paid to a liquidator on top of the debt equivalent."""
    return (collateral_equivalent * bonus_pct) // PERCENT_SCALE
