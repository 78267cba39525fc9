"""
Unified order models.

Every adapter converts its exchange-specific order payloads and execution
reports into UnifiedOrder. All quantities use Decimal. ``cost`` and
``datetime`` are derived properties and are never read from the wire.

Models:
    OrderSide: Enum for order side (buy/sell)
    OrderStatus: Enum for unified order status
    TimeInForce: Enum for time-in-force values
    UnifiedOrder: Normalized order snapshot
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, computed_field, model_validator

from tradebridge.core.safe import iso8601

MARKET_ORDER_TYPES = ("market", "stop")


class OrderSide(str, Enum):
    """
    Order or trade side.

    Attributes:
        BUY: Buy base currency
        SELL: Sell base currency
    """

    BUY = "buy"
    SELL = "sell"


class OrderStatus(str, Enum):
    """Unified order status. Adapters map raw status strings into this set."""

    OPEN = "open"
    CLOSED = "closed"
    CANCELED = "canceled"
    EXPIRED = "expired"
    REJECTED = "rejected"


class TimeInForce(str, Enum):
    """Time-in-force values. PO is a synthetic post-only marker."""

    GTC = "GTC"
    IOC = "IOC"
    FOK = "FOK"
    GTD = "GTD"
    PO = "PO"


class UnifiedOrder(BaseModel):
    """
    Normalized order.

    Attributes:
        id: Exchange order id.
        client_order_id: Client-generated order id.
        timestamp: Last update time in milliseconds since epoch.
        symbol: Unified symbol.
        type: Unified order type ("limit", "market", "stop", "stopLimit").
        side: Order side.
        price: Limit price; None only for market and stop-market orders.
        stop_price: Trigger price for stop orders.
        amount: Ordered quantity.
        filled: Executed quantity.
        remaining: Unexecuted quantity.
        average: Average execution price.
        status: Unified status, None when the raw status is unknown.
        time_in_force: Time-in-force as reported.
        post_only: Post-only flag when known.
        trades: Fills belonging to the order, when reported.
        info: Raw exchange payload.

    Example:
        >>> order = UnifiedOrder(
        ...     id="58521038",
        ...     symbol="BTC/EUR",
        ...     type="limit",
        ...     side=OrderSide.SELL,
        ...     price=Decimal("553.08"),
        ...     amount=Decimal("0.5"),
        ...     filled=Decimal("0.2"),
        ...     remaining=Decimal("0.3"),
        ...     average=Decimal("553.08"),
        ...     status=OrderStatus.OPEN,
        ... )
        >>> order.cost
        Decimal('110.616')
    """

    model_config = {"frozen": True, "extra": "forbid"}

    id: Optional[str] = Field(default=None, description="Exchange order id")
    client_order_id: Optional[str] = Field(default=None, description="Client order id")
    timestamp: Optional[int] = Field(default=None, ge=0, description="Milliseconds since epoch")
    last_trade_timestamp: Optional[int] = Field(default=None, ge=0)
    symbol: Optional[str] = Field(default=None, description="Unified symbol")
    type: Optional[str] = Field(default=None, description="Unified order type")
    side: Optional[OrderSide] = Field(default=None)
    price: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    stop_price: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    amount: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    filled: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    remaining: Optional[Decimal] = Field(default=None)
    average: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    status: Optional[OrderStatus] = Field(default=None)
    time_in_force: Optional[str] = Field(default=None)
    post_only: Optional[bool] = Field(default=None)
    trades: Optional[List[Any]] = Field(default=None)
    info: Dict[str, Any] = Field(default_factory=dict)

    @computed_field  # type: ignore[misc]
    @property
    def datetime(self) -> Optional[str]:
        """ISO-8601 form of ``timestamp``."""
        return iso8601(self.timestamp)

    @computed_field  # type: ignore[misc]
    @property
    def cost(self) -> Optional[Decimal]:
        """
        Executed notional, ``filled * average``.

        Returns:
            Optional[Decimal]: None when either factor is unknown.
        """
        if self.filled is None or self.average is None:
            return None
        return self.filled * self.average

    @model_validator(mode="after")
    def validate_quantities(self) -> "UnifiedOrder":
        """
        Validate order consistency.

        Ensures:
            - amount == filled + remaining when all three are known
            - price is present for non-market orders with a known type
        """
        if (
            self.amount is not None
            and self.filled is not None
            and self.remaining is not None
            and self.amount != self.filled + self.remaining
        ):
            raise ValueError(
                f"amount ({self.amount}) must equal filled ({self.filled}) "
                f"+ remaining ({self.remaining})"
            )
        if (
            self.price is None
            and self.type is not None
            and self.type not in MARKET_ORDER_TYPES
        ):
            raise ValueError(f"price is required for {self.type} orders")
        return self

    @property
    def is_open(self) -> bool:
        """Check if the order can still execute."""
        return self.status == OrderStatus.OPEN
