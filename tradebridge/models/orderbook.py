"""
Order book models.

An ``OrderBook`` is a snapshot with both sides ordered best level first.
Amounts are in base currency and prices in quote currency.
"""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, computed_field, model_validator

from tradebridge.core.safe import iso8601


class PriceLevel(BaseModel):
    """One ``[price, amount]`` row of a book side."""

    model_config = {"frozen": True, "extra": "ignore"}

    price: Decimal = Field(..., ge=Decimal("0"))
    amount: Decimal = Field(..., ge=Decimal("0"))


def _is_ordered(levels: List[PriceLevel], descending: bool) -> bool:
    prices = [level.price for level in levels]
    return prices == sorted(prices, reverse=descending)


class OrderBook(BaseModel):
    """
    Unified order book.

    Attributes:
        symbol: Unified symbol.
        timestamp: Snapshot time in milliseconds, when the exchange sends one.
        nonce: Exchange sequence number, when the exchange sends one.
        bids: Highest price first.
        asks: Lowest price first.

    Example:
        >>> book = OrderBook(
        ...     symbol="BTC/EUR",
        ...     bids=[PriceLevel(price=Decimal("100"), amount=Decimal("1"))],
        ...     asks=[PriceLevel(price=Decimal("101"), amount=Decimal("2"))],
        ... )
        >>> book.spread
        Decimal('1')
    """

    model_config = {"frozen": True, "extra": "ignore"}

    symbol: str = Field(..., min_length=1)
    timestamp: Optional[int] = Field(default=None, ge=0)
    nonce: Optional[int] = Field(default=None)
    bids: List[PriceLevel] = Field(default_factory=list)
    asks: List[PriceLevel] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_side_ordering(self) -> "OrderBook":
        if not _is_ordered(self.bids, descending=True):
            raise ValueError(f"{self.symbol} bids are not in descending price order")
        if not _is_ordered(self.asks, descending=False):
            raise ValueError(f"{self.symbol} asks are not in ascending price order")
        return self

    @computed_field  # type: ignore[misc]
    @property
    def datetime(self) -> Optional[str]:
        return iso8601(self.timestamp)

    @computed_field  # type: ignore[misc]
    @property
    def best_bid(self) -> Optional[Decimal]:
        return self.bids[0].price if self.bids else None

    @computed_field  # type: ignore[misc]
    @property
    def best_ask(self) -> Optional[Decimal]:
        return self.asks[0].price if self.asks else None

    @computed_field  # type: ignore[misc]
    @property
    def spread(self) -> Optional[Decimal]:
        """``best_ask - best_bid``; None while either side is empty."""
        if self.best_bid is None or self.best_ask is None:
            return None
        return self.best_ask - self.best_bid
