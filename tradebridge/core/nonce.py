"""
Strictly increasing nonce source for signed requests.

Exchanges reject a signed request whose nonce is not greater than the last
one seen for the same key. Wall clock time alone is not enough: two calls in
the same millisecond, or a clock stepped backwards, would repeat or decrease
the value.
"""

import threading
from typing import Callable, Optional

from tradebridge.core.safe import milliseconds


class MonotonicNonce:
    """
    Millisecond nonce generator that never returns a non-increasing value.

    Each call returns ``max(clock(), last + 1)``. One instance must be shared
    by every request signed with the same credentials.

    Example:
        >>> nonce = MonotonicNonce()
        >>> a, b = nonce.next(), nonce.next()
        >>> b > a
        True
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None):
        self._clock = clock or milliseconds
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        """Return the next nonce."""
        with self._lock:
            candidate = int(self._clock())
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return candidate

    @property
    def last(self) -> int:
        """Most recently issued nonce, 0 before the first call."""
        return self._last
