"""
Price-quote freshness kernel.

This module is intentionally small and pure:
- The functional core computes freshness decisions deterministically.
- The imperative shell is responsible for fetching quotes and the current time.
"""

from __future__ import annotations

from dataclasses import dataclass

from .cdp.errors import StalePriceError
from .cdp.valuation import PriceQuote


@dataclass(frozen=True)
class FreshnessPolicy:
    """Maximum accepted age of a price quote; None disables the check."""

    max_staleness_seconds: int | None = None

    def __post_init__(self) -> None:
        if self.max_staleness_seconds is not None and self.max_staleness_seconds <= 0:
            raise ValueError(
                f"max_staleness_seconds must be positive: {self.max_staleness_seconds}"
            )


def is_fresh(policy: FreshnessPolicy, quote: PriceQuote, current_timestamp: int) -> bool:
    """Return True if the quote timestamp is within the max staleness window."""
    if current_timestamp < 0:
        raise ValueError(f"current_timestamp must be non-negative: {current_timestamp}")
    if policy.max_staleness_seconds is None:
        return True
    if quote.updated_at > current_timestamp:
        return False
    return (current_timestamp - quote.updated_at) <= policy.max_staleness_seconds


def require_fresh(policy: FreshnessPolicy, asset: str, quote: PriceQuote, current_timestamp: int) -> PriceQuote:
    """Return `quote` unchanged, or fail closed with `StalePriceError`."""
    if not is_fresh(policy, quote, current_timestamp):
        raise StalePriceError(
            asset=asset,
            updated_at=quote.updated_at,
            now=current_timestamp,
            max_age=policy.max_staleness_seconds,
        )
    return quote
