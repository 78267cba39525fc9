"""
Defensive field extraction and collection helpers.

Exchange payloads omit fields, send empty strings, or mix numbers and
strings. These helpers read such payloads without ever turning an absent
value into zero: a missing or unparseable field always yields None.
"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, TypeVar

T = TypeVar("T")


def safe_value(data: Optional[Mapping[str, Any]], *keys: str, default: Any = None) -> Any:
    """Return the first present, non-empty value among keys."""
    if not data:
        return default
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return default


def safe_string(data: Optional[Mapping[str, Any]], *keys: str) -> Optional[str]:
    """Return the first present value among keys as a string."""
    value = safe_value(data, *keys)
    if value is None:
        return None
    return str(value)


def safe_decimal(data: Optional[Mapping[str, Any]], *keys: str) -> Optional[Decimal]:
    """
    Return the first present value among keys as a Decimal.

    Floats are converted through str() so that 0.1 becomes Decimal("0.1").
    Booleans, empty strings and unparseable values yield None.

    Example:
        >>> safe_decimal({"execPrice": "150"}, "execPrice")
        Decimal('150')
        >>> safe_decimal({"execPrice": ""}, "execPrice") is None
        True
    """
    value = safe_value(data, *keys)
    return to_decimal(value)


def to_decimal(value: Any) -> Optional[Decimal]:
    """Convert a scalar to Decimal, or None when it is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


def safe_integer(data: Optional[Mapping[str, Any]], *keys: str) -> Optional[int]:
    """Return the first present value among keys as an int."""
    value = safe_decimal(data, *keys)
    if value is None:
        return None
    return int(value)


def milliseconds() -> int:
    """Current UTC time in milliseconds since epoch."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def iso8601(timestamp_ms: Optional[int]) -> Optional[str]:
    """
    Format a millisecond timestamp as ISO-8601 with millisecond precision.

    Example:
        >>> iso8601(1480067768415)
        '2016-11-25T09:56:08.415Z'
    """
    if timestamp_ms is None:
        return None
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{timestamp_ms % 1000:03d}Z"


def sort_by_timestamp(items: Iterable[T]) -> List[T]:
    """
    Stable ascending sort on the ``timestamp`` attribute.

    Items without a timestamp keep their relative order after all
    timestamped items.
    """
    return sorted(
        items,
        key=lambda item: (
            getattr(item, "timestamp", None) is None,
            getattr(item, "timestamp", None) or 0,
        ),
    )


def filter_by_symbol_since_limit(
    items: Sequence[T],
    symbol: Optional[str] = None,
    since: Optional[int] = None,
    limit: Optional[int] = None,
) -> List[T]:
    """
    Filter an ascending list by symbol and start time, then keep the first ``limit``.

    Args:
        items: Items sorted ascending by timestamp.
        symbol: Keep only items with this symbol, if given.
        since: Keep only items with timestamp >= since, if given.
        limit: Keep at most this many of the earliest remaining items.

    Returns:
        List[T]: The filtered items, order preserved.
    """
    result = list(items)
    if symbol is not None:
        result = [item for item in result if getattr(item, "symbol", None) == symbol]
    if since is not None:
        result = [
            item
            for item in result
            if getattr(item, "timestamp", None) is not None and item.timestamp >= since  # type: ignore[attr-defined]
        ]
    if limit is not None:
        result = result[:limit]
    return result


def index_by(items: Iterable[T], key: Callable[[T], str]) -> dict:
    """Build a dict keyed by key(item); later items win on collision."""
    return {key(item): item for item in items}
