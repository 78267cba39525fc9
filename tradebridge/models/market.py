"""
Market, currency and account metadata models.

Models:
    MarketType: Enum of market classes (spot, swap, future)
    Market: Tradable instrument with exchange id, unified symbol and increments
    Currency: Currency code with its exchange id
    Account: Trading sub-account reference
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class MarketType(str, Enum):
    """Market class of an instrument."""

    SPOT = "spot"
    SWAP = "swap"
    FUTURE = "future"


class Market(BaseModel):
    """
    Tradable instrument metadata.

    Attributes:
        id: Exchange-specific market identifier (e.g., "BTCEUR").
        symbol: Unified symbol (e.g., "BTC/EUR", "BTC/USDT:USDT").
        base: Unified base currency code.
        quote: Unified quote currency code.
        type: Market class.
        contract: True for perpetual and dated futures markets.
        amount_increment: Smallest order size step.
        price_increment: Smallest price step.
        min_amount: Minimum order size.

    Example:
        >>> market = Market(id="BTCEUR", symbol="BTC/EUR", base="BTC", quote="EUR")
        >>> market.contract
        False
    """

    model_config = {"frozen": True, "extra": "forbid"}

    id: str = Field(..., min_length=1, description="Exchange market identifier")
    symbol: str = Field(..., min_length=1, description="Unified symbol")
    base: str = Field(..., description="Unified base currency code")
    quote: str = Field(..., description="Unified quote currency code")
    base_id: Optional[str] = Field(default=None, description="Exchange base currency id")
    quote_id: Optional[str] = Field(default=None, description="Exchange quote currency id")
    type: str = Field(default=MarketType.SPOT.value, description="Market class")
    contract: bool = Field(default=False, description="Perpetual or futures market")
    active: bool = Field(default=True)
    amount_increment: Optional[Decimal] = Field(default=None, gt=Decimal("0"))
    price_increment: Optional[Decimal] = Field(default=None, gt=Decimal("0"))
    min_amount: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    info: Dict[str, Any] = Field(default_factory=dict, description="Raw exchange payload")


class Currency(BaseModel):
    """Currency code with its exchange-specific identifier."""

    model_config = {"frozen": True, "extra": "forbid"}

    id: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1)


class Account(BaseModel):
    """
    Trading account reference.

    Attributes:
        id: Exchange account number (e.g., "AFN561A01").
        main: Whether the exchange marks this as the main account.
        info: Raw exchange payload.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    id: str = Field(..., min_length=1)
    main: bool = Field(default=False)
    info: Dict[str, Any] = Field(default_factory=dict)
