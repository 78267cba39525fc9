"""
Parameter bag normalization.

Unified calls accept an open-ended ``params`` mapping next to their explicit
arguments. Some keys in it are routing hints for the adapter (``type``,
``defaultType``, ``tag``) and must never reach the wire. The functions here
extract those keys and return a fresh mapping without them. Input mappings
are never mutated.
"""

from typing import Any, Dict, Mapping, Optional, Tuple

from tradebridge.config.models import ExchangeOptions
from tradebridge.models.market import Market

MARKET_TYPE_KEYS = ("type", "defaultType")


def extend(*mappings: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Merge mappings left to right into a new dict; later keys win."""
    result: Dict[str, Any] = {}
    for mapping in mappings:
        if mapping:
            result.update(mapping)
    return result


def omit(params: Optional[Mapping[str, Any]], *keys: str) -> Dict[str, Any]:
    """Return a copy of params without the given keys."""
    if not params:
        return {}
    return {k: v for k, v in params.items() if k not in keys}


def _type_from(mapping: Optional[Mapping[str, Any]]) -> Optional[str]:
    if not mapping:
        return None
    for key in ("defaultType", "type"):
        value = mapping.get(key)
        if value is not None and value != "":
            return str(value)
    return None


def extract_market_type(
    method_name: str,
    market: Optional[Market] = None,
    params: Optional[Mapping[str, Any]] = None,
    options: Optional[ExchangeOptions] = None,
) -> Tuple[str, Dict[str, Any]]:
    """
    Resolve the effective market type for a call.

    Resolution order, first match wins:
        1. ``params["defaultType"]`` / ``params["type"]``
        2. ``market.type`` when a market is given
        3. ``options.method_options[method_name]`` (a bare string, or a
           mapping holding ``defaultType`` / ``type``)
        4. ``options.default_type``
        5. ``"spot"``

    Args:
        method_name: Unified operation name used to look up per-method options.
        market: Resolved market, if the call targets one.
        params: Caller parameter bag.
        options: Adapter option context.

    Returns:
        Tuple[str, Dict[str, Any]]: Resolved type and params with the
            ``type`` / ``defaultType`` keys removed.

    Example:
        >>> extract_market_type("fetch_balance", None, {"type": "swap", "x": 1})
        ('swap', {'x': 1})
    """
    resolved = options.default_type if options and options.default_type else "spot"

    if options is not None:
        method_option = options.method_options.get(method_name)
        if isinstance(method_option, str):
            resolved = method_option
        elif isinstance(method_option, Mapping):
            resolved = _type_from(method_option) or resolved

    if market is not None:
        resolved = market.type

    resolved = _type_from(params) or resolved
    return resolved, omit(params, *MARKET_TYPE_KEYS)


def extract_withdraw_tag(
    tag: Any,
    params: Optional[Mapping[str, Any]] = None,
) -> Tuple[Optional[str], Dict[str, Any]]:
    """
    Separate a withdrawal destination tag from the parameter bag.

    A mapping passed in the ``tag`` position is a misplaced params bag: it is
    merged into params (explicit params win) and the tag is cleared. When no
    tag was passed, ``params["tag"]`` is used and stripped.

    Returns:
        Tuple[Optional[str], Dict[str, Any]]: Tag (or None) and params
            without a ``tag`` key when the tag was taken from it.

    Example:
        >>> extract_withdraw_tag({"tag": "123", "network": "ERC20"}, {})
        ('123', {'network': 'ERC20'})
    """
    merged = extend(params)
    if isinstance(tag, Mapping):
        merged = extend(tag, params)
        tag = None

    if tag is None or tag == "":
        raw_tag = merged.get("tag")
        if raw_tag is None or raw_tag == "":
            return None, omit(merged, "tag")
        return str(raw_tag), omit(merged, "tag")

    return str(tag), merged
