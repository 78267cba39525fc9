"""
Amount and price formatting against market increments.

Amounts are truncated toward zero so an order never exceeds what the caller
asked for. Prices are rounded to the nearest increment.
"""

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal
from typing import Optional


def _to_increment(value: Decimal, increment: Optional[Decimal], rounding: str) -> Decimal:
    if increment is None or increment <= 0:
        return value
    steps = (value / increment).quantize(Decimal("1"), rounding=rounding)
    return (steps * increment).quantize(increment)


def amount_to_precision(amount: Decimal, increment: Optional[Decimal]) -> str:
    """
    Truncate an amount to a multiple of the size increment.

    Example:
        >>> amount_to_precision(Decimal("1.23456"), Decimal("0.001"))
        '1.234'
    """
    return format(_to_increment(amount, increment, ROUND_DOWN), "f")


def price_to_precision(price: Decimal, increment: Optional[Decimal]) -> str:
    """
    Round a price to the nearest multiple of the price increment.

    Example:
        >>> price_to_precision(Decimal("553.0851"), Decimal("0.01"))
        '553.09'
    """
    return format(_to_increment(price, increment, ROUND_HALF_UP), "f")
