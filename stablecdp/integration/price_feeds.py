"""In-memory aggregator-style price feed."""

from __future__ import annotations

from ..core.cdp.math import DEFAULT_FEED_DECIMALS
from ..core.cdp.valuation import PriceQuote


class StaticPriceFeed:
    """Price feed whose answer is set explicitly; each update opens a new round."""

    def __init__(self, price: int, decimals: int = DEFAULT_FEED_DECIMALS, updated_at: int = 0):
        if price < 0:
            raise ValueError(f"price must be non-negative: {price}")
        self.decimals = decimals
        self._quote = PriceQuote(price=price, decimals=decimals, round_id=1, updated_at=updated_at)

    def latest_round_data(self) -> PriceQuote:
        return self._quote

    def update_answer(self, price: int, updated_at: int | None = None) -> None:
        if price < 0:
            raise ValueError(f"price must be non-negative: {price}")
        self._quote = PriceQuote(
            price=price,
            decimals=self.decimals,
            round_id=self._quote.round_id + 1,
            updated_at=self._quote.updated_at if updated_at is None else updated_at,
        )
