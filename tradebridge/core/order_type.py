"""
Order type and time-in-force resolution.

Runs before any order request is built. Rejects combinations that cannot
be honoured together (a resting post-only order that must also fill
immediately, or a post-only market order) so that an illegal order is
never transmitted.
"""

from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Tuple

from tradebridge.core.params import omit
from tradebridge.core.safe import to_decimal
from tradebridge.errors import ArgumentsRequired, InvalidOrder

POST_ONLY_KEYS = ("postOnly", "post_only")
IMMEDIATE_TIME_IN_FORCE = ("IOC", "FOK")
POST_ONLY_TIME_IN_FORCE = "PO"


def _normalize_tif(time_in_force: Optional[str]) -> Optional[str]:
    if time_in_force is None or time_in_force == "":
        return None
    return str(time_in_force).upper()


def resolve_post_only(
    order_type: str,
    time_in_force: Optional[str] = None,
    exchange_flag: bool = False,
    params: Optional[Mapping[str, Any]] = None,
    exchange: Optional[str] = None,
) -> Tuple[str, bool, Optional[str], Dict[str, Any]]:
    """
    Derive the effective order type, post-only flag and time-in-force.

    Post-only is requested by any of: ``params["postOnly"]`` /
    ``params["post_only"]``, ``order_type == "postOnly"``,
    ``time_in_force == "PO"`` or the exchange-native ``exchange_flag``.

    Args:
        order_type: Unified order type ("limit", "market", "postOnly", ...).
        time_in_force: Requested time-in-force; ``params["timeInForce"]``
            is used when this is None.
        exchange_flag: Exchange-native post-only indicator.
        params: Caller parameter bag.
        exchange: Adapter id for error messages.

    Returns:
        Tuple of (type, post_only, time_in_force, params). When post-only
        is not requested, type, time-in-force and params pass through.
        Otherwise type becomes "limit", a synthetic "PO" time-in-force is
        cleared, and the post-only and time-in-force keys are stripped from
        params.

    Raises:
        InvalidOrder: Post-only combined with IOC/FOK, or with a market order.

    Example:
        >>> resolve_post_only("limit", "PO", False, {})
        ('limit', True, None, {})
    """
    params = dict(params or {})
    if time_in_force is None:
        time_in_force = params.get("timeInForce")
    tif = _normalize_tif(time_in_force)

    requested = (
        any(bool(params.get(key)) for key in POST_ONLY_KEYS)
        or order_type == "postOnly"
        or tif == POST_ONLY_TIME_IN_FORCE
        or bool(exchange_flag)
    )

    if not requested:
        return order_type, False, time_in_force, params

    if tif in IMMEDIATE_TIME_IN_FORCE:
        raise InvalidOrder(
            f"postOnly orders cannot have timeInForce equal to {tif}",
            exchange=exchange,
            operation="create_order",
        )
    if order_type == "market":
        raise InvalidOrder(
            "market orders cannot be postOnly",
            exchange=exchange,
            operation="create_order",
        )

    if tif == POST_ONLY_TIME_IN_FORCE:
        tif = None

    return "limit", True, tif, omit(params, *POST_ONLY_KEYS, "timeInForce")


def is_post_only(
    is_market_order: bool,
    exchange_flag: bool = False,
    params: Optional[Mapping[str, Any]] = None,
    exchange: Optional[str] = None,
) -> bool:
    """
    Check whether params request a post-only order.

    Same rejection rules as resolve_post_only, without rewriting anything.

    Raises:
        InvalidOrder: Post-only combined with IOC/FOK, or with a market order.
    """
    order_type = "market" if is_market_order else "limit"
    _, post_only, _, _ = resolve_post_only(
        order_type, None, exchange_flag, params, exchange=exchange
    )
    return post_only


def check_order_arguments(
    order_type: str,
    amount: Any,
    price: Any = None,
    exchange: Optional[str] = None,
) -> Decimal:
    """
    Validate the primitive order arguments.

    Returns:
        Decimal: The amount as a Decimal.

    Raises:
        ArgumentsRequired: Amount missing or not above zero, or a limit
            order without a price.
    """
    if price is None and order_type == "limit":
        raise ArgumentsRequired(
            "requires a price argument for a limit order",
            exchange=exchange,
            operation="create_order",
        )
    value = to_decimal(amount)
    if value is None or value <= 0:
        raise ArgumentsRequired(
            "amount should be above 0",
            exchange=exchange,
            operation="create_order",
        )
    return value
