"""
Globitex exchange adapter.

Main adapter implementation that implements the ExchangeAdapter interface
for the Globitex REST API (spot markets only).

This adapter:
    - Builds requests with GlobitexRequestBuilder
    - Signs private requests with GlobitexSigner (HMAC-SHA512, nonce header)
    - Maps the Globitex error envelope and HTTP statuses to exceptions
    - Normalizes responses with GlobitexNormalizer

Globitex-Specific Details:
    - Orders are addressed by client order id, not exchange order id
    - Every private trading call is scoped to a trading account number
    - Closed orders are emulated by filtering recent orders
    - Payouts of fiat currencies go by bank transfer, others by crypto payout

Example:
    >>> from tradebridge.adapters.globitex import GlobitexAdapter
    >>> from tradebridge.config import load_config
    >>>
    >>> config = load_config()
    >>> async with GlobitexAdapter(config.get_exchange("globitex")) as exchange:
    ...     book = await exchange.fetch_order_book("BTC/EUR")
    ...     print(book.spread)
"""

import json
from decimal import Decimal
from typing import Any, Dict, List, Optional, Type

import structlog

from tradebridge.adapters.globitex.normalizer import GlobitexNormalizer
from tradebridge.adapters.globitex.requests import GlobitexRequestBuilder
from tradebridge.adapters.globitex.signer import GlobitexSigner
from tradebridge.config.models import ApiEndpoints, ExchangeConfig
from tradebridge.core.capabilities import Capability
from tradebridge.core.context import RequestContext, SignedRequest
from tradebridge.core.nonce import MonotonicNonce
from tradebridge.core.safe import (
    filter_by_symbol_since_limit,
    safe_integer,
    safe_string,
    safe_value,
)
from tradebridge.errors import (
    ArgumentsRequired,
    AuthenticationError,
    BadRequest,
    BadResponse,
    CancelRejected,
    ExchangeError,
    ExchangeNotAvailable,
    InvalidNonce,
    NullResponse,
    OrderNotFound,
    PermissionDenied,
)
from tradebridge.interfaces.exchange_adapter import ExchangeAdapter
from tradebridge.models.balance import Balance
from tradebridge.models.market import Account, Currency, Market
from tradebridge.models.order import OrderStatus, UnifiedOrder
from tradebridge.models.orderbook import OrderBook
from tradebridge.models.ticker import UnifiedTicker
from tradebridge.models.trade import UnifiedTrade
from tradebridge.models.transfer import Withdrawal, WithdrawFee
from tradebridge.transport.base import Transport, TransportResponse

logger = structlog.get_logger(__name__)

DEFAULT_PUBLIC_URL = "https://api.globitex.com/api/1/public/"
DEFAULT_PRIVATE_URL = "https://api.globitex.com/api/"

ERROR_CODES: Dict[int, Type[ExchangeError]] = {
    20: AuthenticationError,  # Missing nonce
    30: AuthenticationError,  # Missing signature
    40: AuthenticationError,  # Invalid API key
    50: InvalidNonce,  # Nonce is not monotonous
    60: AuthenticationError,  # Nonce is not valid
    70: AuthenticationError,  # Wrong signature
    80: PermissionDenied,  # No permissions
    90: AuthenticationError,  # API key is not enabled
    100: AuthenticationError,  # API key locked
    110: AuthenticationError,  # Invalid client state
    120: AuthenticationError,  # Invalid API key state
    130: ExchangeNotAvailable,  # Trading suspended
    140: ExchangeNotAvailable,  # REST API suspended
    200: BadRequest,  # Mandatory parameter missing
}

HTTP_ERRORS: Dict[int, Type[ExchangeError]] = {
    400: BadRequest,
    403: PermissionDenied,
    404: OrderNotFound,
    500: ExchangeError,
}


class GlobitexAdapter(ExchangeAdapter):
    """
    Globitex exchange adapter implementing ExchangeAdapter interface.

    Attributes:
        exchange_name: Always returns "globitex".
        builder: Request builder.
        signer: Request signer, owner of the nonce sequence.

    Example:
        >>> adapter = GlobitexAdapter(exchange_config)
        >>> order = await adapter.create_limit_buy_order("BTC/EUR", Decimal("0.5"), Decimal("30000"))
        >>> await adapter.cancel_order(order.client_order_id, "BTC/EUR")
    """

    capabilities = frozenset(
        {
            Capability.FETCH_TIME,
            Capability.FETCH_MARKETS,
            Capability.FETCH_TICKER,
            Capability.FETCH_TICKERS,
            Capability.FETCH_ORDER_BOOK,
            Capability.FETCH_TRADES,
            Capability.FETCH_BALANCE,
            Capability.WITHDRAW,
            Capability.FETCH_WITHDRAW_FEE,
            Capability.CREATE_ORDER,
            Capability.CREATE_MARKET_ORDER,
            Capability.CREATE_STOP_ORDER,
            Capability.CREATE_STOP_LIMIT_ORDER,
            Capability.CREATE_STOP_MARKET_ORDER,
            Capability.CANCEL_ORDER,
            Capability.CANCEL_ALL_ORDERS,
            Capability.FETCH_ORDER,
            Capability.FETCH_ORDERS,
            Capability.FETCH_OPEN_ORDERS,
            Capability.FETCH_MY_TRADES,
        }
    )
    emulated = frozenset(
        {
            Capability.FETCH_ACCOUNTS,
            Capability.FETCH_CURRENCIES,
            Capability.FETCH_CLOSED_ORDERS,
            Capability.EDIT_ORDER,
        }
    )

    def __init__(
        self,
        config: Optional[ExchangeConfig] = None,
        transport: Optional[Transport] = None,
        nonce: Optional[MonotonicNonce] = None,
    ):
        """
        Initialize Globitex adapter.

        Args:
            config: Exchange configuration from config/exchanges.yaml.
            transport: HTTP transport (default: AiohttpTransport).
            nonce: Nonce source (default: millisecond clock).
        """
        super().__init__(config, transport)

        endpoints = ApiEndpoints(
            public=self.config.api.public or DEFAULT_PUBLIC_URL,
            private=self.config.api.private or DEFAULT_PRIVATE_URL,
        )
        self.signer = GlobitexSigner(
            self.config.credentials, endpoints, nonce=nonce, exchange=self.exchange_name
        )
        self.builder = GlobitexRequestBuilder(self.exchange_name, self.options, self.signer)

        logger.info(
            "globitex_adapter_initialized",
            public_url=endpoints.public,
            private_url=endpoints.private,
            has_credentials=self.config.credentials.is_complete,
        )

    @property
    def exchange_name(self) -> str:
        """Return exchange identifier."""
        return "globitex"

    # -------------------------------------------------------------------------
    # Request pipeline
    # -------------------------------------------------------------------------

    def sign(self, context: RequestContext) -> SignedRequest:
        return self.signer.sign(context)

    def handle_response(self, context: RequestContext, response: TransportResponse) -> Any:
        """
        Decode a response and raise for error envelopes and HTTP errors.

        Checks, in order: the ``errors`` envelope, the ``error_message``
        key, the HTTP status, and finally whether the body was JSON at all.
        """
        try:
            payload = json.loads(response.text) if response.text else None
            decoded = True
        except ValueError:
            payload = None
            decoded = False

        if isinstance(payload, dict):
            self._raise_for_envelope(context, payload)

        if not response.ok:
            error_class = HTTP_ERRORS.get(response.status, ExchangeError)
            logger.warning(
                "http_error_response",
                exchange=self.exchange_name,
                operation=context.operation,
                status=response.status,
                body=response.text[:500],
            )
            raise error_class(
                f"HTTP {response.status}: {response.text[:200]}",
                exchange=self.exchange_name,
                operation=context.operation,
            )

        if not decoded or payload is None:
            raise BadResponse(
                f"returned a non-JSON body: {response.text[:200]!r}",
                exchange=self.exchange_name,
                operation=context.operation,
            )
        return payload

    def _raise_for_envelope(self, context: RequestContext, payload: Dict[str, Any]) -> None:
        errors = payload.get("errors")
        if errors:
            first = errors[0] if isinstance(errors, list) else errors
            code = safe_integer(first, "code")
            message = safe_string(first, "message") or "unknown error"
            error_class = ERROR_CODES.get(code, ExchangeError) if code is not None else ExchangeError
            logger.warning(
                "exchange_error_response",
                exchange=self.exchange_name,
                operation=context.operation,
                code=code,
                error_message=message,
            )
            raise error_class(
                f"error {code}: {message}",
                exchange=self.exchange_name,
                operation=context.operation,
            )

        if "error_message" in payload:
            logger.warning(
                "exchange_error_response",
                exchange=self.exchange_name,
                operation=context.operation,
                error_message=payload["error_message"],
            )
            raise ExchangeError(
                json.dumps(payload),
                exchange=self.exchange_name,
                operation=context.operation,
            )

    def _optional_market(self, symbol: Optional[str], operation: str) -> Optional[Market]:
        return self.market(symbol, operation) if symbol is not None else None

    def _parse_order(self, raw: Dict[str, Any], market: Optional[Market] = None) -> UnifiedOrder:
        market = self.safe_market(safe_string(raw, "symbol"), market)
        return GlobitexNormalizer.normalize_order(raw, market)

    def _parse_execution_report(
        self, raw: Dict[str, Any], market: Optional[Market] = None
    ) -> UnifiedOrder:
        market = self.safe_market(safe_string(raw, "symbol"), market)
        return GlobitexNormalizer.normalize_execution_report(raw, market)

    def _parse_trade(self, raw: Dict[str, Any], market: Optional[Market] = None) -> UnifiedTrade:
        market = self.safe_market(safe_string(raw, "symbol"), market)
        return GlobitexNormalizer.normalize_trade(raw, market)

    # -------------------------------------------------------------------------
    # Public market data
    # -------------------------------------------------------------------------

    async def fetch_time(self, params: Optional[Dict[str, Any]] = None) -> int:
        """
        Fetch the exchange clock.

        Returns:
            int: Server time in milliseconds.
        """
        payload = await self.execute(self.builder.time(params))
        timestamp = safe_integer(payload, "timestamp")
        if timestamp is None:
            raise NullResponse(
                "returned no timestamp",
                exchange=self.exchange_name,
                operation="fetch_time",
            )
        return timestamp

    async def fetch_markets(self, params: Optional[Dict[str, Any]] = None) -> List[Market]:
        payload = await self.execute(self.builder.symbols(params))
        rows = safe_value(payload, "symbols", default=[])
        return [GlobitexNormalizer.normalize_market(row) for row in rows]

    async def fetch_currencies(
        self, params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Currency]:
        """
        Derive currencies from market definitions.

        Globitex has no currency listing; every base and quote currency of
        a market is reported.
        """
        markets = list(self._markets.values()) or await self.fetch_markets(params)
        result: Dict[str, Currency] = {}
        for market in markets:
            for code, currency_id in (
                (market.base, market.base_id),
                (market.quote, market.quote_id),
            ):
                if code and code not in result:
                    result[code] = Currency(id=currency_id or code, code=code)
        return result

    async def fetch_ticker(
        self, symbol: str, params: Optional[Dict[str, Any]] = None
    ) -> UnifiedTicker:
        await self.load_markets()
        market = self.market(symbol, "fetch_ticker")
        payload = await self.execute(self.builder.ticker(market, params))
        return GlobitexNormalizer.normalize_ticker(payload, market)

    async def fetch_tickers(
        self,
        symbols: Optional[List[str]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, UnifiedTicker]:
        """Fetch all tickers, optionally restricted to ``symbols``."""
        await self.load_markets()
        payload = await self.execute(self.builder.tickers(params))
        result: Dict[str, UnifiedTicker] = {}
        for raw in safe_value(payload, "instruments", default=[]):
            market = self.safe_market(safe_string(raw, "symbol"))
            ticker = GlobitexNormalizer.normalize_ticker(raw, market)
            if ticker.symbol is None:
                continue
            if symbols is None or ticker.symbol in symbols:
                result[ticker.symbol] = ticker
        return result

    async def fetch_order_book(
        self,
        symbol: str,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> OrderBook:
        await self.load_markets()
        market = self.market(symbol, "fetch_order_book")
        payload = await self.execute(self.builder.order_book(market, params))
        return GlobitexNormalizer.normalize_order_book(payload, market.symbol, limit)

    async def fetch_trades(
        self,
        symbol: str,
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[UnifiedTrade]:
        await self.load_markets()
        market = self.market(symbol, "fetch_trades")
        payload = await self.execute(self.builder.trades(market, since, limit, params))
        return self.parse_trades(
            safe_value(payload, "trades", default=[]),
            GlobitexNormalizer.normalize_public_trade,
            market,
            since,
            limit,
        )

    # -------------------------------------------------------------------------
    # Account
    # -------------------------------------------------------------------------

    async def fetch_accounts(self, params: Optional[Dict[str, Any]] = None) -> List[Account]:
        """
        List trading accounts.

        Emulated through the payment accounts listing, which also carries
        balances.
        """
        payload = await self.execute(self.builder.accounts("fetch_accounts", params))
        return [
            GlobitexNormalizer.normalize_account(row)
            for row in safe_value(payload, "accounts", default=[])
        ]

    async def fetch_balance(self, params: Optional[Dict[str, Any]] = None) -> Balance:
        """Fetch balances of the resolved trading account."""
        account_id = await self.resolve_account_id(params, "fetch_balance")
        payload = await self.execute(self.builder.accounts("fetch_balance", params))
        return GlobitexNormalizer.normalize_balance(payload, account_id)

    # -------------------------------------------------------------------------
    # Trading
    # -------------------------------------------------------------------------

    async def create_order(
        self,
        symbol: str,
        type: str,
        side: str,
        amount: Optional[Decimal] = None,
        price: Optional[Decimal] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> UnifiedOrder:
        """
        Place an order.

        A ``clientOrderId`` is generated when params do not carry one, so
        resubmitting the same params after a timeout cannot create a
        duplicate order.

        Raises:
            ArgumentsRequired: Missing amount, price or stop price.
            InvalidOrder: Contradictory parameters.
            NotSupported: Post-only requested.
            BadResponse: No ExecutionReport in the response.
        """
        await self.load_markets()
        market = self.market(symbol, "create_order")
        account_id = await self.resolve_account_id(params, "create_order")
        context = self.builder.create_order(market, type, side, amount, price, account_id, params)

        payload = await self.execute(context)
        report = safe_value(payload, "ExecutionReport")
        if not isinstance(report, dict):
            raise BadResponse(
                "returned no ExecutionReport",
                exchange=self.exchange_name,
                operation="create_order",
            )

        order = self._parse_execution_report(report, market)
        logger.info(
            "order_created",
            exchange=self.exchange_name,
            symbol=market.symbol,
            client_order_id=order.client_order_id,
            status=order.status.value if order.status else None,
        )
        return order

    async def cancel_order(
        self,
        id: str,
        symbol: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> UnifiedOrder:
        """
        Cancel an order by client order id.

        Returns:
            UnifiedOrder: The order from the ExecutionReport.

        Raises:
            CancelRejected: The exchange answered with a CancelReject.
            BadResponse: Neither an ExecutionReport nor a CancelReject.
        """
        await self.load_markets()
        market = self._optional_market(symbol, "cancel_order")
        account_id = await self.resolve_account_id(params, "cancel_order")
        payload = await self.execute(self.builder.cancel_order(id, account_id, params))

        report = safe_value(payload, "ExecutionReport")
        if isinstance(report, dict):
            order = self._parse_execution_report(report, market)
            logger.info(
                "order_cancelled",
                exchange=self.exchange_name,
                client_order_id=id,
                status=order.status.value if order.status else None,
            )
            return order

        reject = safe_value(payload, "CancelReject")
        if isinstance(reject, dict):
            reason = safe_string(reject, "rejectReasonCode")
            logger.warning(
                "order_cancel_rejected",
                exchange=self.exchange_name,
                client_order_id=id,
                reason=reason,
            )
            raise CancelRejected(
                f"order {id} was not cancelled: {reason}",
                order_id=id,
                reason=reason,
                exchange=self.exchange_name,
                operation="cancel_order",
            )

        raise BadResponse(
            "returned neither ExecutionReport nor CancelReject",
            exchange=self.exchange_name,
            operation="cancel_order",
        )

    async def cancel_all_orders(
        self,
        symbol: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[UnifiedOrder]:
        """Cancel every open order, optionally for one symbol only."""
        await self.load_markets()
        market = self._optional_market(symbol, "cancel_all_orders")
        account_id = await self.resolve_account_id(params, "cancel_all_orders")
        payload = await self.execute(self.builder.cancel_all_orders(market, account_id, params))

        reports = safe_value(payload, "ExecutionReport", default=[])
        if isinstance(reports, dict):
            reports = [reports]
        return [self._parse_execution_report(report, market) for report in reports]

    async def fetch_order(
        self,
        id: str,
        symbol: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> UnifiedOrder:
        """
        Fetch one order by client order id.

        Raises:
            OrderNotFound: The exchange returned no matching order.
        """
        await self.load_markets()
        market = self._optional_market(symbol, "fetch_order")
        account_id = await self.resolve_account_id(params, "fetch_order")
        payload = await self.execute(self.builder.fetch_order(id, account_id, params))

        orders = safe_value(payload, "orders", default=[])
        if not orders:
            raise OrderNotFound(
                f"order {id} not found",
                exchange=self.exchange_name,
                operation="fetch_order",
            )
        return self._parse_order(orders[0], market)

    async def fetch_orders(
        self,
        symbol: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[UnifiedOrder]:
        await self.load_markets()
        market = self._optional_market(symbol, "fetch_orders")
        account_id = await self.resolve_account_id(params, "fetch_orders")
        payload = await self.execute(self.builder.fetch_orders(market, account_id, params))
        return self.parse_orders(
            safe_value(payload, "orders", default=[]), self._parse_order, market, since, limit
        )

    async def fetch_open_orders(
        self,
        symbol: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[UnifiedOrder]:
        await self.load_markets()
        market = self._optional_market(symbol, "fetch_open_orders")
        account_id = await self.resolve_account_id(params, "fetch_open_orders")
        payload = await self.execute(self.builder.fetch_open_orders(market, account_id, params))
        return self.parse_orders(
            safe_value(payload, "orders", default=[]), self._parse_order, market, since, limit
        )

    async def fetch_closed_orders(
        self,
        symbol: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[UnifiedOrder]:
        """
        Fetch orders that can no longer execute.

        Emulated: recent orders are requested with the terminal statuses
        and anything still open (including ``suspended``) is dropped before
        ``limit`` is applied.
        """
        await self.load_markets()
        market = self._optional_market(symbol, "fetch_closed_orders")
        account_id = await self.resolve_account_id(params, "fetch_closed_orders")
        payload = await self.execute(
            self.builder.fetch_closed_orders(market, account_id, params)
        )
        orders = self.parse_orders(
            safe_value(payload, "orders", default=[]), self._parse_order, market, since
        )
        closed = [order for order in orders if order.status != OrderStatus.OPEN]
        return filter_by_symbol_since_limit(closed, limit=limit)

    async def fetch_my_trades(
        self,
        symbol: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[UnifiedTrade]:
        await self.load_markets()
        market = self._optional_market(symbol, "fetch_my_trades")
        account_id = await self.resolve_account_id(params, "fetch_my_trades")
        payload = await self.execute(self.builder.fetch_my_trades(market, account_id, params))
        return self.parse_trades(
            safe_value(payload, "trades", default=[]), self._parse_trade, market, since, limit
        )

    # -------------------------------------------------------------------------
    # Payouts
    # -------------------------------------------------------------------------

    async def withdraw(
        self,
        code: str,
        amount: Decimal,
        address: Optional[str] = None,
        tag: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Withdrawal:
        """
        Request a payout.

        Args:
            code: Unified currency code.
            amount: Amount to pay out.
            address: Destination address (crypto payouts).
            tag: Destination tag; not supported, must be empty.
            params: Payout fields. Always ``requestTime``; for crypto
                ``commission``; for bank transfers ``paymentType``,
                ``beneficiaryAccount`` and, depending on the transfer,
                ``beneficiaryName``, ``beneficiarySwiftCode``,
                ``intermediaryAccount`` / ``intermediarySwiftCode``.

        Returns:
            Withdrawal: Acknowledgement carrying the transaction code.

        Raises:
            ArgumentsRequired: A mandatory payout field is missing.
            NotSupported: A destination tag was given.
        """
        # Validate before any network call
        payout = self.builder.check_withdraw(code, amount, address, tag, params)

        await self.load_markets()
        currency = self.currency(code)
        account_id = await self.resolve_account_id({"account": payout.account}, "withdraw")
        context = self.builder.withdraw(currency, amount, address, account_id, payout)
        payload = await self.execute(context)

        logger.info(
            "withdraw_requested",
            exchange=self.exchange_name,
            currency=code,
            transaction_code=safe_string(payload, "transactionCode"),
        )
        return Withdrawal(
            id=safe_string(payload, "transactionCode"),
            currency=code,
            amount=amount,
            address=address,
            info=payload,
        )

    async def fetch_withdraw_fee(
        self,
        code: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> WithdrawFee:
        """
        Quote the payout fee for ``params["amount"]`` of a currency.

        Raises:
            ArgumentsRequired: No amount given.
        """
        if safe_value(params, "amount") is None:
            raise ArgumentsRequired(
                "requires an amount parameter",
                exchange=self.exchange_name,
                operation="fetch_withdraw_fee",
            )

        await self.load_markets()
        currency = self.currency(code)
        account_id = await self.resolve_account_id(params, "fetch_withdraw_fee")
        context = self.builder.withdraw_fee(currency, account_id, params)
        payload = await self.execute(context)
        return GlobitexNormalizer.normalize_withdraw_fee(
            payload, currency.code, self.builder.is_fiat(currency.code)
        )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"GlobitexAdapter(markets={len(self._markets)}, accounts={len(self._accounts)})"
