"""
Operations composed from adapter primitives.

Nothing here talks to an exchange directly: every method delegates to the
primitives of the host adapter (create_order, cancel_order, fetch_ohlcv,
fetch_funding_rates, single-item parsers) and adds only argument checks,
capability gating and result extraction. Sub-calls are awaited strictly in
sequence and any failure aborts the composite immediately.

CompositeOperations is mixed into ExchangeAdapter and relies on its
primitives, capability flags and market cache.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

import structlog

from tradebridge.core.params import extend
from tradebridge.core.safe import (
    filter_by_symbol_since_limit,
    milliseconds,
    sort_by_timestamp,
)
from tradebridge.errors import ArgumentsRequired, BadSymbol, NotSupported, NullResponse
from tradebridge.core.capabilities import Capability
from tradebridge.models.derivatives import (
    BorrowInterest,
    Candle,
    FundingRate,
    FundingRateHistory,
    OpenInterest,
)
from tradebridge.models.market import Market
from tradebridge.models.order import UnifiedOrder

logger = structlog.get_logger(__name__)


class CompositeOperations:
    """
    Cross-exchange orchestration built only from primitives.

    Example:
        >>> order = await adapter.edit_order(
        ...     "cid-1", "BTC/EUR", "limit", "buy", Decimal("0.5"), Decimal("30000")
        ... )
    """

    def _require(self, capability: Capability) -> None:
        if not self.has(capability):  # type: ignore[attr-defined]
            raise NotSupported(
                "is not supported yet",
                exchange=self.exchange_name,  # type: ignore[attr-defined]
                operation=capability.value,
            )

    # -------------------------------------------------------------------------
    # Order editing
    # -------------------------------------------------------------------------

    async def edit_order(
        self,
        id: str,
        symbol: str,
        type: str,
        side: str,
        amount: Optional[Decimal] = None,
        price: Optional[Decimal] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> UnifiedOrder:
        """
        Replace an order by cancelling it and placing a new one.

        The cancel is awaited before the create is issued; creating first
        could double the position.

        Warning:
            This is NOT atomic. If the cancel succeeds and the create fails,
            the original order stays cancelled and no replacement exists. The
            create error propagates unchanged; nothing is retried or restored.

        Args:
            id: Order id to cancel.
            symbol: Unified symbol.
            type: Order type of the replacement.
            side: Order side of the replacement.
            amount: Amount of the replacement.
            price: Price of the replacement.
            params: Extra parameters for the create call.

        Returns:
            UnifiedOrder: The replacement order.
        """
        await self.cancel_order(id, symbol)  # type: ignore[attr-defined]
        logger.info(
            "edit_order_cancelled",
            exchange=self.exchange_name,  # type: ignore[attr-defined]
            order_id=id,
            symbol=symbol,
        )
        return await self.create_order(symbol, type, side, amount, price, params)  # type: ignore[attr-defined]

    async def edit_limit_order(
        self,
        id: str,
        symbol: str,
        side: str,
        amount: Optional[Decimal] = None,
        price: Optional[Decimal] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> UnifiedOrder:
        """Replace an order with a limit order. Not atomic, see edit_order."""
        return await self.edit_order(id, symbol, "limit", side, amount, price, params)

    async def edit_limit_buy_order(
        self,
        id: str,
        symbol: str,
        amount: Optional[Decimal] = None,
        price: Optional[Decimal] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> UnifiedOrder:
        return await self.edit_limit_order(id, symbol, "buy", amount, price, params)

    async def edit_limit_sell_order(
        self,
        id: str,
        symbol: str,
        amount: Optional[Decimal] = None,
        price: Optional[Decimal] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> UnifiedOrder:
        return await self.edit_limit_order(id, symbol, "sell", amount, price, params)

    # -------------------------------------------------------------------------
    # Order creation shortcuts
    # -------------------------------------------------------------------------

    async def create_limit_order(
        self,
        symbol: str,
        side: str,
        amount: Decimal,
        price: Decimal,
        params: Optional[Dict[str, Any]] = None,
    ) -> UnifiedOrder:
        return await self.create_order(symbol, "limit", side, amount, price, params)  # type: ignore[attr-defined]

    async def create_market_order(
        self,
        symbol: str,
        side: str,
        amount: Decimal,
        price: Optional[Decimal] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> UnifiedOrder:
        self._require(Capability.CREATE_MARKET_ORDER)
        return await self.create_order(symbol, "market", side, amount, price, params)  # type: ignore[attr-defined]

    async def create_limit_buy_order(
        self,
        symbol: str,
        amount: Decimal,
        price: Decimal,
        params: Optional[Dict[str, Any]] = None,
    ) -> UnifiedOrder:
        return await self.create_limit_order(symbol, "buy", amount, price, params)

    async def create_limit_sell_order(
        self,
        symbol: str,
        amount: Decimal,
        price: Decimal,
        params: Optional[Dict[str, Any]] = None,
    ) -> UnifiedOrder:
        return await self.create_limit_order(symbol, "sell", amount, price, params)

    async def create_market_buy_order(
        self,
        symbol: str,
        amount: Decimal,
        params: Optional[Dict[str, Any]] = None,
    ) -> UnifiedOrder:
        return await self.create_market_order(symbol, "buy", amount, None, params)

    async def create_market_sell_order(
        self,
        symbol: str,
        amount: Decimal,
        params: Optional[Dict[str, Any]] = None,
    ) -> UnifiedOrder:
        return await self.create_market_order(symbol, "sell", amount, None, params)

    async def create_post_only_order(
        self,
        symbol: str,
        type: str,
        side: str,
        amount: Decimal,
        price: Optional[Decimal] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> UnifiedOrder:
        """Place an order that may only rest on the book."""
        self._require(Capability.CREATE_POST_ONLY_ORDER)
        query = extend(params, {"postOnly": True})
        return await self.create_order(symbol, type, side, amount, price, query)  # type: ignore[attr-defined]

    async def create_reduce_only_order(
        self,
        symbol: str,
        type: str,
        side: str,
        amount: Decimal,
        price: Optional[Decimal] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> UnifiedOrder:
        """Place an order that may only reduce an existing position."""
        self._require(Capability.CREATE_REDUCE_ONLY_ORDER)
        query = extend(params, {"reduceOnly": True})
        return await self.create_order(symbol, type, side, amount, price, query)  # type: ignore[attr-defined]

    async def create_stop_order(
        self,
        symbol: str,
        type: str,
        side: str,
        amount: Decimal,
        price: Optional[Decimal] = None,
        stop_price: Optional[Decimal] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> UnifiedOrder:
        """
        Place an order triggered at ``stop_price``.

        Raises:
            NotSupported: If the adapter cannot place stop orders.
            ArgumentsRequired: If stop_price is missing.
        """
        self._require(Capability.CREATE_STOP_ORDER)
        if stop_price is None:
            raise ArgumentsRequired(
                "requires a stop_price argument",
                exchange=self.exchange_name,  # type: ignore[attr-defined]
                operation="create_stop_order",
            )
        query = extend(params, {"stopPrice": stop_price})
        return await self.create_order(symbol, type, side, amount, price, query)  # type: ignore[attr-defined]

    async def create_stop_limit_order(
        self,
        symbol: str,
        side: str,
        amount: Decimal,
        price: Decimal,
        stop_price: Decimal,
        params: Optional[Dict[str, Any]] = None,
    ) -> UnifiedOrder:
        self._require(Capability.CREATE_STOP_LIMIT_ORDER)
        query = extend(params, {"stopPrice": stop_price})
        return await self.create_order(symbol, "limit", side, amount, price, query)  # type: ignore[attr-defined]

    async def create_stop_market_order(
        self,
        symbol: str,
        side: str,
        amount: Decimal,
        stop_price: Decimal,
        params: Optional[Dict[str, Any]] = None,
    ) -> UnifiedOrder:
        self._require(Capability.CREATE_STOP_MARKET_ORDER)
        query = extend(params, {"stopPrice": stop_price})
        return await self.create_order(symbol, "market", side, amount, None, query)  # type: ignore[attr-defined]

    # -------------------------------------------------------------------------
    # Derivatives
    # -------------------------------------------------------------------------

    async def fetch_funding_rate(
        self,
        symbol: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> FundingRate:
        """
        Fetch the funding rate of one contract market through the bulk call.

        Raises:
            NotSupported: If the adapter has no bulk funding-rate fetch.
            BadSymbol: If the market is not a contract market.
            NullResponse: If the bulk result has no entry for the symbol.
        """
        if not self.has(Capability.FETCH_FUNDING_RATES):  # type: ignore[attr-defined]
            raise NotSupported(
                "is not supported yet",
                exchange=self.exchange_name,  # type: ignore[attr-defined]
                operation="fetch_funding_rate",
            )

        await self.load_markets()  # type: ignore[attr-defined]
        market: Market = self.market(symbol, "fetch_funding_rate")  # type: ignore[attr-defined]
        if not market.contract:
            raise BadSymbol(
                "supports contract markets only",
                exchange=self.exchange_name,  # type: ignore[attr-defined]
                operation="fetch_funding_rate",
            )

        rates = await self.fetch_funding_rates([symbol], params)  # type: ignore[attr-defined]
        rate = rates.get(symbol) if rates else None
        if rate is None:
            raise NullResponse(
                f"returned no data for {symbol}",
                exchange=self.exchange_name,  # type: ignore[attr-defined]
                operation="fetch_funding_rate",
            )
        return rate

    async def _fetch_price_ohlcv(
        self,
        capability: Capability,
        price_type: str,
        symbol: str,
        timeframe: str,
        since: Optional[int],
        limit: Optional[int],
        params: Optional[Dict[str, Any]],
    ) -> List[Candle]:
        self._require(capability)
        request = {"price": price_type}
        return await self.fetch_ohlcv(  # type: ignore[attr-defined]
            symbol, timeframe, since, limit, extend(request, params)
        )

    async def fetch_mark_ohlcv(
        self,
        symbol: str,
        timeframe: str = "1m",
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[Candle]:
        """
        Fetch mark price candles.

        Args:
            symbol: Unified symbol of the market.
            timeframe: Length of time each candle represents.
            since: Timestamp in ms of the earliest candle to fetch.
            limit: Maximum number of candles to fetch.
            params: Extra exchange-specific parameters.

        Returns:
            List[Candle]: Candles ordered by timestamp.
        """
        return await self._fetch_price_ohlcv(
            Capability.FETCH_MARK_OHLCV, "mark", symbol, timeframe, since, limit, params
        )

    async def fetch_index_ohlcv(
        self,
        symbol: str,
        timeframe: str = "1m",
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[Candle]:
        """Fetch index price candles. Arguments as fetch_mark_ohlcv."""
        return await self._fetch_price_ohlcv(
            Capability.FETCH_INDEX_OHLCV, "index", symbol, timeframe, since, limit, params
        )

    async def fetch_premium_index_ohlcv(
        self,
        symbol: str,
        timeframe: str = "1m",
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[Candle]:
        """Fetch premium index candles. Arguments as fetch_mark_ohlcv."""
        return await self._fetch_price_ohlcv(
            Capability.FETCH_PREMIUM_INDEX_OHLCV,
            "premiumIndex",
            symbol,
            timeframe,
            since,
            limit,
            params,
        )

    # -------------------------------------------------------------------------
    # List parsers
    # -------------------------------------------------------------------------

    def parse_borrow_interests(
        self,
        response: List[Dict[str, Any]],
        market: Optional[Market] = None,
    ) -> List[BorrowInterest]:
        return [
            self.parse_borrow_interest(row, market)  # type: ignore[attr-defined]
            for row in response
        ]

    def parse_funding_rate_histories(
        self,
        response: List[Dict[str, Any]],
        market: Optional[Market] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[FundingRateHistory]:
        """
        Parse funding history rows, sort ascending, then filter.

        Sorting happens before filtering so ``limit`` keeps the earliest
        entries at or after ``since``.
        """
        rates = [
            self.parse_funding_rate_history(entry, market)  # type: ignore[attr-defined]
            for entry in response
        ]
        symbol = market.symbol if market is not None else None
        return filter_by_symbol_since_limit(sort_by_timestamp(rates), symbol, since, limit)

    def parse_open_interests(
        self,
        response: List[Dict[str, Any]],
        market: Optional[Market] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[OpenInterest]:
        """Parse open interest rows, sort ascending, then filter."""
        interests = [
            self.parse_open_interest(entry, market)  # type: ignore[attr-defined]
            for entry in response
        ]
        symbol = market.symbol if market is not None else None
        return filter_by_symbol_since_limit(sort_by_timestamp(interests), symbol, since, limit)

    # -------------------------------------------------------------------------
    # Clock
    # -------------------------------------------------------------------------

    async def load_time_difference(self, params: Optional[Dict[str, Any]] = None) -> int:
        """
        Measure local clock minus exchange clock in milliseconds.

        Returns:
            int: The stored difference.
        """
        server_time = await self.fetch_time(params)  # type: ignore[attr-defined]
        after = milliseconds()
        self._time_difference = after - server_time
        logger.info(
            "time_difference_loaded",
            exchange=self.exchange_name,  # type: ignore[attr-defined]
            time_difference_ms=self._time_difference,
        )
        return self._time_difference
