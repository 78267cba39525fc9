"""
Account balance models.

Models:
    BalanceEntry: Free, used and total amounts of one currency
    Balance: Per-currency balances of one account
"""

from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, model_validator


class BalanceEntry(BaseModel):
    """
    Balance of a single currency.

    Attributes:
        free: Amount available for trading or withdrawal.
        used: Amount reserved by open orders or pending payouts.
        total: free + used.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    free: Optional[Decimal] = Field(default=None)
    used: Optional[Decimal] = Field(default=None)
    total: Optional[Decimal] = Field(default=None)

    @model_validator(mode="after")
    def validate_total(self) -> "BalanceEntry":
        """Ensure total equals free + used when all three are known."""
        if (
            self.free is not None
            and self.used is not None
            and self.total is not None
            and self.total != self.free + self.used
        ):
            raise ValueError(
                f"total ({self.total}) must equal free ({self.free}) + used ({self.used})"
            )
        return self


class Balance(BaseModel):
    """
    Balances of one account keyed by unified currency code.

    Example:
        >>> balance.get("EUR").free
        Decimal('100.0')
    """

    model_config = {"frozen": True, "extra": "forbid"}

    account: Optional[str] = Field(default=None, description="Account the balances belong to")
    entries: Dict[str, BalanceEntry] = Field(default_factory=dict)
    info: Dict[str, Any] = Field(default_factory=dict)

    def get(self, code: str) -> Optional[BalanceEntry]:
        """Return the entry for a currency code, or None."""
        return self.entries.get(code)
