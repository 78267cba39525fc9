"""
Exchange adapter interface.

This module defines the abstract base class that all exchange adapters
must implement. It provides a consistent interface for market metadata,
market data, trading, account and payout operations across exchanges.

The base class owns everything that is identical for every exchange: the
market and account caches, symbol resolution, account
selection, list sorting and filtering, and the request pipeline
(build, sign, send, interpret). An adapter supplies endpoint knowledge,
a signer and a response interpreter.

Example:
    >>> async with create_adapter("globitex", config) as exchange:
    ...     await exchange.load_markets()
    ...     ticker = await exchange.fetch_ticker("BTC/EUR")
    ...     print(ticker.last)
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Callable, Dict, FrozenSet, List, Optional

import structlog

from tradebridge.config.models import ExchangeConfig, ExchangeOptions
from tradebridge.core.capabilities import Capability
from tradebridge.core.composite import CompositeOperations
from tradebridge.core.context import RequestContext, SignedRequest
from tradebridge.core.safe import (
    filter_by_symbol_since_limit,
    index_by,
    sort_by_timestamp,
)
from tradebridge.errors import ArgumentsRequired, BadSymbol, NetworkError, NotSupported
from tradebridge.models.balance import Balance
from tradebridge.models.derivatives import (
    BorrowInterest,
    Candle,
    FundingRate,
    FundingRateHistory,
    OpenInterest,
)
from tradebridge.models.market import Account, Currency, Market
from tradebridge.models.order import UnifiedOrder
from tradebridge.models.orderbook import OrderBook
from tradebridge.models.ticker import UnifiedTicker
from tradebridge.models.trade import UnifiedTrade
from tradebridge.models.transfer import Withdrawal, WithdrawFee
from tradebridge.transport.aiohttp_client import AiohttpTransport
from tradebridge.transport.base import Transport, TransportResponse

logger = structlog.get_logger(__name__)


class ExchangeAdapter(CompositeOperations, ABC):
    """
    Abstract base class for exchange adapters.

    All exchange-specific implementations must inherit from this class and
    implement the abstract members. Unified operations an adapter does not
    override raise NotSupported.

    Attributes:
        capabilities: Operations the adapter implements natively.
        emulated: Operations the adapter derives from other calls.

    Concurrency:
        Caches are filled lazily and only grow; concurrent first loads may
        both fetch, and the later write wins with identical content.
    """

    capabilities: FrozenSet[Capability] = frozenset()
    emulated: FrozenSet[Capability] = frozenset()

    def __init__(
        self,
        config: Optional[ExchangeConfig] = None,
        transport: Optional[Transport] = None,
    ):
        """
        Initialize adapter.

        Args:
            config: Exchange configuration (endpoints, credentials, options).
            transport: HTTP transport; an AiohttpTransport is created from
                the connection settings when omitted.
        """
        self.config = config or ExchangeConfig()
        self.transport = transport or AiohttpTransport(
            self.exchange_name,
            rate_limit_per_second=self.config.connection.rate_limit_per_second,
            timeout_seconds=self.config.connection.timeout_seconds,
        )

        self._markets: Dict[str, Market] = {}
        self._markets_by_id: Dict[str, Market] = {}
        self._currencies: Dict[str, Currency] = {}
        self._accounts: List[Account] = []
        self._time_difference = 0

    # -------------------------------------------------------------------------
    # Identity and capabilities
    # -------------------------------------------------------------------------

    @property
    @abstractmethod
    def exchange_name(self) -> str:
        """
        Return the adapter identifier.

        Returns:
            str: Exchange identifier (e.g., "globitex")
        """
        pass

    @property
    def options(self) -> ExchangeOptions:
        """Adapter option context."""
        return self.config.options

    @property
    def markets(self) -> Dict[str, Market]:
        """Loaded markets keyed by unified symbol."""
        return self._markets

    @property
    def accounts(self) -> List[Account]:
        """Loaded accounts in exchange order."""
        return list(self._accounts)

    @property
    def time_difference(self) -> int:
        """Local clock minus exchange clock in ms, set by load_time_difference."""
        return self._time_difference

    def has(self, capability: Capability) -> bool:
        """Check if an operation is available natively or emulated."""
        return capability in self.capabilities or capability in self.emulated

    def _not_supported(self, operation: str) -> NotSupported:
        return NotSupported(
            "is not supported yet",
            exchange=self.exchange_name,
            operation=operation,
        )

    # -------------------------------------------------------------------------
    # Metadata caches
    # -------------------------------------------------------------------------

    async def load_markets(self, reload: bool = False) -> Dict[str, Market]:
        """
        Load markets once and cache them by symbol and exchange id.

        Args:
            reload: Fetch again even when markets are cached.

        Returns:
            Dict[str, Market]: Markets keyed by unified symbol.
        """
        if self._markets and not reload:
            return self._markets

        markets = await self.fetch_markets()
        by_symbol = index_by(markets, lambda m: m.symbol)
        self._markets = {**self._markets, **by_symbol}
        self._markets_by_id = {
            **self._markets_by_id,
            **index_by(markets, lambda m: m.id),
        }

        currencies = await self.fetch_currencies()
        self._currencies = {**self._currencies, **currencies}

        logger.info(
            "markets_loaded",
            exchange=self.exchange_name,
            markets=len(self._markets),
            currencies=len(self._currencies),
        )
        return self._markets

    async def load_accounts(self, reload: bool = False) -> List[Account]:
        """
        Load trading accounts once and cache them in exchange order.

        A reload only appends accounts not seen before.
        """
        if self._accounts and not reload:
            return list(self._accounts)

        fetched = await self.fetch_accounts()
        known = {account.id for account in self._accounts}
        self._accounts.extend(a for a in fetched if a.id not in known)

        logger.info(
            "accounts_loaded",
            exchange=self.exchange_name,
            accounts=len(self._accounts),
        )
        return list(self._accounts)

    def market(self, symbol: Optional[str], operation: Optional[str] = None) -> Market:
        """
        Resolve a unified symbol (or exchange market id) to a Market.

        ``operation`` names the calling operation in the raised error.

        Raises:
            BadSymbol: If markets are not loaded or the symbol is unknown.
        """
        if symbol is not None:
            if symbol in self._markets:
                return self._markets[symbol]
            if symbol in self._markets_by_id:
                return self._markets_by_id[symbol]
        raise BadSymbol(
            f"does not have market symbol {symbol}",
            exchange=self.exchange_name,
            operation=operation,
        )

    def safe_market(
        self,
        market_id: Optional[str],
        market: Optional[Market] = None,
    ) -> Optional[Market]:
        """
        Resolve a raw exchange market id leniently.

        Returns the cached market for ``market_id``, else the ``market``
        passed by the caller, else None. Never raises.
        """
        if market_id is not None and market_id in self._markets_by_id:
            return self._markets_by_id[market_id]
        return market

    def safe_symbol(
        self,
        market_id: Optional[str],
        market: Optional[Market] = None,
    ) -> Optional[str]:
        """Unified symbol for a raw market id, falling back to the id itself."""
        resolved = self.safe_market(market_id, market)
        if resolved is not None:
            return resolved.symbol
        return market_id

    def currency(self, code: str) -> Currency:
        """
        Resolve a unified currency code.

        Unknown codes are passed through unchanged as their own exchange id.
        """
        found = self._currencies.get(code)
        if found is not None:
            return found
        return Currency(id=code, code=code)

    async def resolve_account_id(
        self, params: Optional[Dict[str, Any]] = None, operation: Optional[str] = None
    ) -> str:
        """
        Select the trading account for a private call.

        Resolution order: ``params["account"]``, then the first cached
        account (loading accounts if needed).

        Raises:
            ArgumentsRequired: If no account can be determined.
        """
        requested = (params or {}).get("account")
        if requested:
            return str(requested)

        accounts = await self.load_accounts()
        if not accounts:
            raise ArgumentsRequired(
                "requires at least the default account number",
                exchange=self.exchange_name,
                operation=operation,
            )
        return accounts[0].id

    # -------------------------------------------------------------------------
    # List helpers
    # -------------------------------------------------------------------------

    def parse_orders(
        self,
        raw_orders: List[Dict[str, Any]],
        parser: Callable[[Dict[str, Any], Optional[Market]], UnifiedOrder],
        market: Optional[Market] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[UnifiedOrder]:
        """Normalize raw orders, sort ascending and filter."""
        orders = [parser(raw, market) for raw in raw_orders]
        symbol = market.symbol if market is not None else None
        return filter_by_symbol_since_limit(sort_by_timestamp(orders), symbol, since, limit)

    def parse_trades(
        self,
        raw_trades: List[Dict[str, Any]],
        parser: Callable[[Dict[str, Any], Optional[Market]], UnifiedTrade],
        market: Optional[Market] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[UnifiedTrade]:
        """Normalize raw trades, sort ascending and filter."""
        trades = [parser(raw, market) for raw in raw_trades]
        symbol = market.symbol if market is not None else None
        return filter_by_symbol_since_limit(sort_by_timestamp(trades), symbol, since, limit)

    # -------------------------------------------------------------------------
    # Request pipeline
    # -------------------------------------------------------------------------

    @abstractmethod
    def sign(self, context: RequestContext) -> SignedRequest:
        """
        Turn a request context into a transport-ready request.

        Raises:
            AuthenticationError: If a private call lacks credentials.
        """
        pass

    @abstractmethod
    def handle_response(self, context: RequestContext, response: TransportResponse) -> Any:
        """
        Interpret a raw response: map error envelopes and HTTP statuses to
        exceptions and return the decoded payload.
        """
        pass

    async def execute(self, context: RequestContext) -> Any:
        """
        Sign, send and interpret one request.

        Args:
            context: Request built for exactly one call.

        Returns:
            Any: Decoded response payload.
        """
        signed = self.sign(context)
        logger.debug(
            "request_sending",
            exchange=self.exchange_name,
            operation=context.operation,
            method=signed.method,
            path=context.path,
        )
        try:
            response = await self.transport.send(
                signed.method,
                signed.url,
                headers=signed.headers,
                body=signed.body,
            )
        except NetworkError as e:
            if e.operation is not None:
                raise
            # Transports do not know the operation; re-raise with it attached
            raise type(e)(
                e.message,
                exchange=e.exchange or self.exchange_name,
                operation=context.operation,
            ) from e
        return self.handle_response(signed.context, response)

    async def close(self) -> None:
        """Close the transport."""
        await self.transport.close()
        logger.info("adapter_closed", exchange=self.exchange_name)

    async def __aenter__(self) -> "ExchangeAdapter":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Unified operations
    # -------------------------------------------------------------------------

    @abstractmethod
    async def fetch_markets(self, params: Optional[Dict[str, Any]] = None) -> List[Market]:
        """
        Fetch all tradable markets.

        Returns:
            List[Market]: Market metadata in exchange order.
        """
        pass

    async def fetch_currencies(
        self, params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Currency]:
        """Fetch currencies keyed by unified code. Empty unless overridden."""
        return {}

    async def fetch_time(self, params: Optional[Dict[str, Any]] = None) -> int:
        raise self._not_supported("fetch_time")

    async def fetch_accounts(self, params: Optional[Dict[str, Any]] = None) -> List[Account]:
        raise self._not_supported("fetch_accounts")

    async def fetch_ticker(
        self, symbol: str, params: Optional[Dict[str, Any]] = None
    ) -> UnifiedTicker:
        raise self._not_supported("fetch_ticker")

    async def fetch_tickers(
        self,
        symbols: Optional[List[str]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, UnifiedTicker]:
        raise self._not_supported("fetch_tickers")

    async def fetch_order_book(
        self,
        symbol: str,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> OrderBook:
        raise self._not_supported("fetch_order_book")

    async def fetch_trades(
        self,
        symbol: str,
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[UnifiedTrade]:
        raise self._not_supported("fetch_trades")

    async def fetch_ohlcv(
        self,
        symbol: str,
        timeframe: str = "1m",
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[Candle]:
        raise self._not_supported("fetch_ohlcv")

    async def fetch_funding_rates(
        self,
        symbols: Optional[List[str]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, FundingRate]:
        raise self._not_supported("fetch_funding_rates")

    async def fetch_balance(self, params: Optional[Dict[str, Any]] = None) -> Balance:
        raise self._not_supported("fetch_balance")

    @abstractmethod
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

        Args:
            symbol: Unified symbol.
            type: Order type ("limit", "market", "stop", "stopLimit").
            side: "buy" or "sell".
            amount: Order quantity in base currency.
            price: Limit price.
            params: Extra exchange-specific parameters.

        Returns:
            UnifiedOrder: The order as acknowledged by the exchange.

        Raises:
            ArgumentsRequired: If amount or a required price is missing.
            InvalidOrder: If the order parameters contradict each other.
        """
        pass

    @abstractmethod
    async def cancel_order(
        self,
        id: str,
        symbol: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> UnifiedOrder:
        """Cancel an order and return its final state."""
        pass

    async def cancel_all_orders(
        self,
        symbol: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        raise self._not_supported("cancel_all_orders")

    async def fetch_order(
        self,
        id: str,
        symbol: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> UnifiedOrder:
        raise self._not_supported("fetch_order")

    async def fetch_orders(
        self,
        symbol: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[UnifiedOrder]:
        raise self._not_supported("fetch_orders")

    async def fetch_open_orders(
        self,
        symbol: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[UnifiedOrder]:
        raise self._not_supported("fetch_open_orders")

    async def fetch_closed_orders(
        self,
        symbol: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[UnifiedOrder]:
        raise self._not_supported("fetch_closed_orders")

    async def fetch_my_trades(
        self,
        symbol: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[UnifiedTrade]:
        raise self._not_supported("fetch_my_trades")

    async def withdraw(
        self,
        code: str,
        amount: Decimal,
        address: Optional[str] = None,
        tag: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Withdrawal:
        raise self._not_supported("withdraw")

    async def fetch_withdraw_fee(
        self,
        code: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> WithdrawFee:
        raise self._not_supported("fetch_withdraw_fee")

    # -------------------------------------------------------------------------
    # Single-item parsers used by composite list parsers
    # -------------------------------------------------------------------------

    def parse_funding_rate_history(
        self, entry: Dict[str, Any], market: Optional[Market] = None
    ) -> FundingRateHistory:
        raise self._not_supported("parse_funding_rate_history")

    def parse_open_interest(
        self, entry: Dict[str, Any], market: Optional[Market] = None
    ) -> OpenInterest:
        raise self._not_supported("parse_open_interest")

    def parse_borrow_interest(
        self, entry: Dict[str, Any], market: Optional[Market] = None
    ) -> BorrowInterest:
        raise self._not_supported("parse_borrow_interest")

    def __repr__(self) -> str:
        """Return string representation."""
        return f"{type(self).__name__}(exchange={self.exchange_name}, markets={len(self._markets)})"
