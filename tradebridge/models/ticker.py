"""
Ticker data model.

Models:
    UnifiedTicker: 24-hour statistics and best prices for a market
"""

from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, computed_field, model_validator

from tradebridge.core.safe import iso8601


class UnifiedTicker(BaseModel):
    """
    Normalized ticker.

    ``close`` is the last traded price; ``last`` mirrors it.

    Attributes:
        symbol: Unified symbol.
        timestamp: Exchange timestamp in milliseconds since epoch.
        high: 24-hour high.
        low: 24-hour low.
        bid: Best bid price.
        ask: Best ask price.
        open: Opening price of the 24-hour window.
        close: Last traded price.
        base_volume: 24-hour volume in base currency.
        quote_volume: 24-hour volume in quote currency.
        info: Raw exchange payload.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    symbol: Optional[str] = Field(default=None)
    timestamp: Optional[int] = Field(default=None, ge=0)
    high: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    low: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    bid: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    ask: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    open: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    close: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    base_volume: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    quote_volume: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    info: Dict[str, Any] = Field(default_factory=dict)

    @computed_field  # type: ignore[misc]
    @property
    def datetime(self) -> Optional[str]:
        """ISO-8601 form of ``timestamp``."""
        return iso8601(self.timestamp)

    @computed_field  # type: ignore[misc]
    @property
    def last(self) -> Optional[Decimal]:
        """Last traded price, same as ``close``."""
        return self.close

    @model_validator(mode="after")
    def validate_ticker(self) -> "UnifiedTicker":
        """Ensure the 24h high is not below the 24h low."""
        if self.high is not None and self.low is not None and self.high < self.low:
            raise ValueError(f"24h high ({self.high}) must be >= 24h low ({self.low})")
        return self
