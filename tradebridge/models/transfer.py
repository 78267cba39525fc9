"""
Withdrawal models.

Models:
    Withdrawal: Acknowledgement of a payout request
    WithdrawFee: Fee quote for a payout
"""

from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class Withdrawal(BaseModel):
    """Payout acknowledgement; ``id`` is the exchange transaction code."""

    model_config = {"frozen": True, "extra": "forbid"}

    id: Optional[str] = Field(default=None)
    currency: Optional[str] = Field(default=None)
    amount: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    address: Optional[str] = Field(default=None)
    info: Dict[str, Any] = Field(default_factory=dict)


class WithdrawFee(BaseModel):
    """
    Fee quote for withdrawing a currency.

    Fiat payouts quote a fee amount and percentage; crypto payouts quote a
    recommended network commission with a fee id and expiry.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    currency: str = Field(..., min_length=1)
    fee: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    minimum: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    maximum: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    percentage: Optional[Decimal] = Field(default=None)
    fee_id: Optional[str] = Field(default=None)
    expire_time: Optional[int] = Field(default=None)
    info: Dict[str, Any] = Field(default_factory=dict)
