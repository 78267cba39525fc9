"""
Derivatives and historical market data models.

These are produced by adapters that support contract markets. The composite
operations only move them around; per-adapter parsers create them.

Models:
    Candle: One OHLCV bar
    FundingRate: Current funding state of a contract market
    FundingRateHistory: One historical funding settlement
    OpenInterest: Open interest observation
    BorrowInterest: Margin borrow interest accrual
"""

from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, computed_field

from tradebridge.core.safe import iso8601


class Candle(BaseModel):
    """
    One OHLCV bar.

    For mark, index and premium-index series ``volume`` is usually None.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    timestamp: int = Field(..., ge=0, description="Bar open time in milliseconds")
    open: Optional[Decimal] = Field(default=None)
    high: Optional[Decimal] = Field(default=None)
    low: Optional[Decimal] = Field(default=None)
    close: Optional[Decimal] = Field(default=None)
    volume: Optional[Decimal] = Field(default=None)


class FundingRate(BaseModel):
    """
    Current funding state of a contract market.

    Attributes:
        symbol: Unified contract symbol.
        timestamp: Observation time in milliseconds.
        funding_rate: Rate applied at the next settlement.
        mark_price: Mark price at observation time.
        index_price: Index price at observation time.
        next_funding_timestamp: Next settlement time in milliseconds.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    symbol: str = Field(..., min_length=1)
    timestamp: Optional[int] = Field(default=None, ge=0)
    funding_rate: Optional[Decimal] = Field(default=None)
    mark_price: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    index_price: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    next_funding_timestamp: Optional[int] = Field(default=None, ge=0)
    info: Dict[str, Any] = Field(default_factory=dict)

    @computed_field  # type: ignore[misc]
    @property
    def datetime(self) -> Optional[str]:
        """ISO-8601 form of ``timestamp``."""
        return iso8601(self.timestamp)


class FundingRateHistory(BaseModel):
    """One historical funding settlement."""

    model_config = {"frozen": True, "extra": "forbid"}

    symbol: Optional[str] = Field(default=None)
    timestamp: Optional[int] = Field(default=None, ge=0)
    funding_rate: Optional[Decimal] = Field(default=None)
    info: Dict[str, Any] = Field(default_factory=dict)

    @computed_field  # type: ignore[misc]
    @property
    def datetime(self) -> Optional[str]:
        return iso8601(self.timestamp)


class OpenInterest(BaseModel):
    """Open interest of a contract market at a point in time."""

    model_config = {"frozen": True, "extra": "forbid"}

    symbol: Optional[str] = Field(default=None)
    timestamp: Optional[int] = Field(default=None, ge=0)
    open_interest_amount: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    open_interest_value: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    info: Dict[str, Any] = Field(default_factory=dict)

    @computed_field  # type: ignore[misc]
    @property
    def datetime(self) -> Optional[str]:
        return iso8601(self.timestamp)


class BorrowInterest(BaseModel):
    """Interest accrued on a margin borrow."""

    model_config = {"frozen": True, "extra": "forbid"}

    currency: Optional[str] = Field(default=None)
    symbol: Optional[str] = Field(default=None, description="Isolated margin market, if any")
    interest: Optional[Decimal] = Field(default=None)
    interest_rate: Optional[Decimal] = Field(default=None)
    amount_borrowed: Optional[Decimal] = Field(default=None)
    timestamp: Optional[int] = Field(default=None, ge=0)
    info: Dict[str, Any] = Field(default_factory=dict)
