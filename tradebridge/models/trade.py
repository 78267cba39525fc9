"""
Unified trade models.

Models:
    TradeFee: Fee charged on a trade
    UnifiedTrade: Normalized public or private trade
"""

from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, computed_field

from tradebridge.core.safe import iso8601
from tradebridge.models.order import OrderSide


class TradeFee(BaseModel):
    """Fee charged on a trade, in ``currency``."""

    model_config = {"frozen": True, "extra": "forbid"}

    cost: Decimal = Field(..., description="Fee amount")
    currency: Optional[str] = Field(default=None, description="Unified fee currency code")


class UnifiedTrade(BaseModel):
    """
    Normalized trade.

    Attributes:
        id: Exchange trade id.
        timestamp: Execution time in milliseconds since epoch.
        symbol: Unified symbol.
        order: Exchange id of the order the trade belongs to (private trades).
        side: Trade side.
        taker_or_maker: "taker" or "maker" when reported.
        price: Execution price.
        amount: Executed quantity.
        fee: Fee charged, when reported.
        info: Raw exchange payload.

    Example:
        >>> trade = UnifiedTrade(id="39", price=Decimal("150"), amount=Decimal("10"))
        >>> trade.cost
        Decimal('1500')
    """

    model_config = {"frozen": True, "extra": "forbid"}

    id: Optional[str] = Field(default=None)
    timestamp: Optional[int] = Field(default=None, ge=0)
    symbol: Optional[str] = Field(default=None)
    order: Optional[str] = Field(default=None)
    type: Optional[str] = Field(default=None)
    side: Optional[OrderSide] = Field(default=None)
    taker_or_maker: Optional[str] = Field(default=None)
    price: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    amount: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    fee: Optional[TradeFee] = Field(default=None)
    info: Dict[str, Any] = Field(default_factory=dict)

    @computed_field  # type: ignore[misc]
    @property
    def datetime(self) -> Optional[str]:
        """ISO-8601 form of ``timestamp``."""
        return iso8601(self.timestamp)

    @computed_field  # type: ignore[misc]
    @property
    def cost(self) -> Optional[Decimal]:
        """Trade notional ``price * amount``, None when either is unknown."""
        if self.price is None or self.amount is None:
            return None
        return self.price * self.amount
