"""
Exception hierarchy for exchange operations.

Every error raised by the core or an adapter derives from ExchangeError and
carries the adapter identity and the failing operation name so a caller can
trace which exchange and which unified call produced it.

Hierarchy:
    ExchangeError
    ├── ArgumentsRequired     mandatory input missing (detected before transmission)
    ├── BadRequest            request rejected as malformed
    ├── InvalidOrder          contradictory order parameters
    │   ├── OrderNotFound
    │   └── CancelRejected    cancel answered with a rejection envelope
    ├── BadSymbol             operation invalid for the resolved market
    ├── NotSupported          capability absent for the adapter
    ├── NullResponse          success response without the expected data
    ├── BadResponse           response present but malformed
    ├── AuthenticationError
    │   ├── InvalidNonce
    │   └── PermissionDenied
    └── NetworkError
        ├── RequestTimeout
        ├── RateLimitExceeded
        └── ExchangeNotAvailable

Example:
    >>> try:
    ...     await adapter.fetch_funding_rate("BTC/USDT:USDT")
    ... except NullResponse as e:
    ...     print(e.exchange, e.operation)
"""

from typing import Optional


class ExchangeError(Exception):
    """
    Base class for all exchange errors.

    Attributes:
        message: Human-readable description.
        exchange: Adapter identifier (e.g., "globitex"), if known.
        operation: Unified operation name (e.g., "create_order"), if known.
    """

    def __init__(
        self,
        message: str,
        exchange: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        self.message = message
        self.exchange = exchange
        self.operation = operation
        super().__init__(self._format())

    def _format(self) -> str:
        prefix = ""
        if self.exchange:
            prefix = f"{self.exchange} "
        if self.operation:
            prefix += f"{self.operation}() "
        return f"{prefix}{self.message}".strip()


class ArgumentsRequired(ExchangeError):
    """Raised when a mandatory input or derived field is missing."""

    pass


class BadRequest(ExchangeError):
    """Raised when the exchange rejects a request as malformed."""

    pass


class InvalidOrder(ExchangeError):
    """Raised for semantically contradictory order parameters."""

    pass


class OrderNotFound(InvalidOrder):
    """Raised when the exchange has no record of the requested order."""

    pass


class CancelRejected(InvalidOrder):
    """
    Raised when a cancel request is answered with a rejection envelope.

    Attributes:
        order_id: The client order id that was targeted.
        reason: Exchange reject-reason code.
    """

    def __init__(
        self,
        message: str,
        order_id: Optional[str] = None,
        reason: Optional[str] = None,
        exchange: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        self.order_id = order_id
        self.reason = reason
        super().__init__(message, exchange=exchange, operation=operation)


class BadSymbol(ExchangeError):
    """Raised when an operation is not valid for the resolved market."""

    pass


class NotSupported(ExchangeError):
    """Raised when the adapter lacks the capability for an operation."""

    pass


class NullResponse(ExchangeError):
    """Raised when the exchange responded successfully but omitted expected data."""

    pass


class BadResponse(ExchangeError):
    """Raised when a response is present but cannot be interpreted."""

    pass


class AuthenticationError(ExchangeError):
    """Raised when credentials are missing or rejected."""

    pass


class InvalidNonce(AuthenticationError):
    """Raised when the exchange rejects a nonce as stale or non-monotonic."""

    pass


class PermissionDenied(AuthenticationError):
    """Raised when the API key lacks permission for the operation."""

    pass


class NetworkError(ExchangeError):
    """Raised when the transport fails to complete a request."""

    pass


class RequestTimeout(NetworkError):
    """Raised when a request exceeds the transport timeout."""

    pass


class RateLimitExceeded(NetworkError):
    """Raised when the exchange answers with HTTP 429."""

    pass


class ExchangeNotAvailable(NetworkError):
    """Raised when trading or the REST API is suspended."""

    pass
