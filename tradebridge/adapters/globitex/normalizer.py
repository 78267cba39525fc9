"""
Globitex data normalizer.

Converts Globitex-specific JSON formats to the unified Pydantic models.
Numbers arrive as strings, empty strings mean "not reported", and
timestamps are already in milliseconds. A field that is absent, empty or
unparseable becomes None, never zero.

Globitex Order Listing Format:
    {
        "orderId": "1",
        "orderStatus": "partiallyFilled",
        "lastTimestamp": 1395659434845,
        "orderPrice": "800",
        "orderQuantity": "1.01",
        "avgPrice": "800",
        "quantityLeaves": "0.01",
        "type": "limit",
        "timeInForce": "GTC",
        "cumQuantity": "1",
        "clientOrderId": "111111111111111111111111",
        "symbol": "BTCEUR",
        "side": "buy",
        "execQuantity": "0.2",
        "account": "ADE922A21"
    }

Globitex ExecutionReport Format (new_order, cancel_order):
    {
        "orderId": "58521038",
        "clientOrderId": "fe02900d762ad2458a942ce5d126c7b2",
        "orderStatus": "new",
        "symbol": "BTCEUR",
        "side": "sell",
        "price": "553.08",
        "quantity": "0.00030",
        "type": "limit",
        "timeInForce": "GTC",
        "lastPrice": "",
        "leavesQuantity": "0.00030",
        "cumQuantity": "0.00000",
        "averagePrice": "0",
        "timestamp": 1480067768415,
        "account": "VER564A02"
    }

Globitex Private Trade Format:
    {
        "tradeId": 39,
        "symbol": "BTCEUR",
        "side": "sell",
        "originalOrderId": "114",
        "execQuantity": "10",
        "execPrice": "150",
        "timestamp": 1395231854030,
        "fee": "0.03",
        "isLiqProvided": false,
        "feeCurrency": "EUR"
    }

Globitex Accounts Format (balances):
    {
        "accounts": [
            {"account": "AFN561A01", "main": true, "balance": [
                {"currency": "EUR", "available": "100.0", "reserved": "0.0"}
            ]}
        ]
    }
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

import structlog

from tradebridge.core.safe import safe_decimal, safe_integer, safe_string, safe_value
from tradebridge.models.balance import Balance, BalanceEntry
from tradebridge.models.market import Account, Market
from tradebridge.models.order import OrderSide, OrderStatus, UnifiedOrder
from tradebridge.models.orderbook import OrderBook, PriceLevel
from tradebridge.models.ticker import UnifiedTicker
from tradebridge.models.trade import TradeFee, UnifiedTrade
from tradebridge.models.transfer import WithdrawFee

logger = structlog.get_logger(__name__)


class GlobitexNormalizer:
    """
    Normalizes Globitex data to unified models.

    Every method takes the raw record and, where relevant, the market the
    caller already resolved. The symbol of a record is the market's symbol
    when one is given, otherwise the raw exchange id.

    Example:
        >>> order = GlobitexNormalizer.normalize_execution_report(report, market)
        >>> order.status
        <OrderStatus.OPEN: 'open'>
    """

    STATUS_MAPPING: Dict[str, Optional[OrderStatus]] = {
        "new": OrderStatus.OPEN,
        "partiallyFilled": OrderStatus.OPEN,
        "suspended": OrderStatus.OPEN,
        "pendingNew": OrderStatus.OPEN,
        "filled": OrderStatus.CLOSED,
        "canceled": OrderStatus.CANCELED,
        "expired": OrderStatus.EXPIRED,
        "rejected": OrderStatus.REJECTED,
    }

    @staticmethod
    def normalize_status(raw_status: Optional[str]) -> Optional[OrderStatus]:
        """
        Map a Globitex order status to the unified status.

        Example:
            >>> GlobitexNormalizer.normalize_status("partiallyFilled")
            <OrderStatus.OPEN: 'open'>
            >>> GlobitexNormalizer.normalize_status("mystery") is None
            True
        """
        if raw_status is None:
            return None
        status = GlobitexNormalizer.STATUS_MAPPING.get(raw_status)
        if status is None:
            logger.warning("unknown_order_status", exchange="globitex", status=raw_status)
        return status

    @staticmethod
    def _side(raw: Dict[str, Any]) -> Optional[OrderSide]:
        side = safe_string(raw, "side")
        if side is None:
            return None
        try:
            return OrderSide(side.lower())
        except ValueError:
            logger.warning("unknown_side", exchange="globitex", side=side)
            return None

    @staticmethod
    def _symbol(raw: Dict[str, Any], market: Optional[Market]) -> Optional[str]:
        if market is not None:
            return market.symbol
        return safe_string(raw, "symbol")

    @staticmethod
    def _build_order(
        raw: Dict[str, Any],
        market: Optional[Market],
        timestamp: Optional[int],
        price: Optional[Decimal],
        amount: Optional[Decimal],
        filled: Optional[Decimal],
        reported_remaining: Optional[Decimal],
        average: Optional[Decimal],
    ) -> UnifiedOrder:
        remaining = reported_remaining
        if amount is not None and filled is not None:
            remaining = amount - filled

        # averagePrice is "0" until the first fill
        if average is not None and average == 0:
            average = None

        return UnifiedOrder(
            id=safe_string(raw, "orderId"),
            client_order_id=safe_string(raw, "clientOrderId"),
            timestamp=timestamp,
            symbol=GlobitexNormalizer._symbol(raw, market),
            type=safe_string(raw, "type"),
            side=GlobitexNormalizer._side(raw),
            price=price,
            stop_price=safe_decimal(raw, "stopPrice"),
            amount=amount,
            filled=filled,
            remaining=remaining,
            average=average,
            status=GlobitexNormalizer.normalize_status(safe_string(raw, "orderStatus")),
            time_in_force=safe_string(raw, "timeInForce"),
            info=raw,
        )

    @staticmethod
    def normalize_order(raw: Dict[str, Any], market: Optional[Market] = None) -> UnifiedOrder:
        """
        Normalize an order from an order listing (active, recent, single).

        ``cumQuantity`` is the executed total; ``execQuantity`` (the last
        execution) is used only when the cumulative figure is absent.
        """
        return GlobitexNormalizer._build_order(
            raw,
            market,
            timestamp=safe_integer(raw, "lastTimestamp", "timestamp"),
            price=safe_decimal(raw, "orderPrice"),
            amount=safe_decimal(raw, "orderQuantity"),
            filled=safe_decimal(raw, "cumQuantity", "execQuantity"),
            reported_remaining=safe_decimal(raw, "quantityLeaves"),
            average=safe_decimal(raw, "avgPrice"),
        )

    @staticmethod
    def normalize_execution_report(
        raw: Dict[str, Any], market: Optional[Market] = None
    ) -> UnifiedOrder:
        """Normalize an ExecutionReport returned by order placement or cancel."""
        return GlobitexNormalizer._build_order(
            raw,
            market,
            timestamp=safe_integer(raw, "timestamp", "created"),
            price=safe_decimal(raw, "price"),
            amount=safe_decimal(raw, "quantity"),
            filled=safe_decimal(raw, "cumQuantity"),
            reported_remaining=safe_decimal(raw, "leavesQuantity"),
            average=safe_decimal(raw, "averagePrice"),
        )

    @staticmethod
    def normalize_trade(raw: Dict[str, Any], market: Optional[Market] = None) -> UnifiedTrade:
        """
        Normalize a private trade.

        Example:
            >>> trade = GlobitexNormalizer.normalize_trade(
            ...     {"tradeId": 39, "execPrice": "150", "execQuantity": "10"}
            ... )
            >>> trade.cost
            Decimal('1500')
        """
        fee_cost = safe_decimal(raw, "fee")
        fee = None
        if fee_cost is not None:
            fee = TradeFee(cost=fee_cost, currency=safe_string(raw, "feeCurrency"))

        taker_or_maker = None
        liquidity = raw.get("isLiqProvided")
        if isinstance(liquidity, bool):
            taker_or_maker = "maker" if liquidity else "taker"

        return UnifiedTrade(
            id=safe_string(raw, "tradeId"),
            timestamp=safe_integer(raw, "timestamp"),
            symbol=GlobitexNormalizer._symbol(raw, market),
            order=safe_string(raw, "originalOrderId"),
            side=GlobitexNormalizer._side(raw),
            taker_or_maker=taker_or_maker,
            price=safe_decimal(raw, "execPrice"),
            amount=safe_decimal(raw, "execQuantity"),
            fee=fee,
            info=raw,
        )

    @staticmethod
    def normalize_public_trade(
        raw: Dict[str, Any], market: Optional[Market] = None
    ) -> UnifiedTrade:
        """Normalize a public trade ({"date", "price", "amount", "tid"})."""
        return UnifiedTrade(
            id=safe_string(raw, "tid"),
            timestamp=safe_integer(raw, "date", "timestamp"),
            symbol=GlobitexNormalizer._symbol(raw, market),
            side=GlobitexNormalizer._side(raw),
            price=safe_decimal(raw, "price"),
            amount=safe_decimal(raw, "amount"),
            info=raw,
        )

    @staticmethod
    def normalize_ticker(raw: Dict[str, Any], market: Optional[Market] = None) -> UnifiedTicker:
        return UnifiedTicker(
            symbol=GlobitexNormalizer._symbol(raw, market),
            timestamp=safe_integer(raw, "timestamp"),
            high=safe_decimal(raw, "high"),
            low=safe_decimal(raw, "low"),
            bid=safe_decimal(raw, "bid"),
            ask=safe_decimal(raw, "ask"),
            open=safe_decimal(raw, "open"),
            close=safe_decimal(raw, "last"),
            base_volume=safe_decimal(raw, "volume"),
            quote_volume=safe_decimal(raw, "volumeQuote"),
            info=raw,
        )

    @staticmethod
    def _levels(raw_levels: List[Any], descending: bool) -> List[PriceLevel]:
        levels: List[PriceLevel] = []
        for level in raw_levels or []:
            if isinstance(level, dict):
                price = safe_decimal(level, "price")
                amount = safe_decimal(level, "volume", "amount")
            else:
                price = safe_decimal({"p": level[0]}, "p")
                amount = safe_decimal({"a": level[1]}, "a")
            if price is None or amount is None:
                continue
            levels.append(PriceLevel(price=price, amount=amount))
        levels.sort(key=lambda x: x.price, reverse=descending)
        return levels

    @staticmethod
    def normalize_order_book(
        raw: Dict[str, Any],
        symbol: str,
        limit: Optional[int] = None,
    ) -> OrderBook:
        """
        Normalize an order book.

        Levels arrive as ``[price, amount]`` string pairs. Bids are sorted
        descending and asks ascending; ``limit`` truncates each side.
        """
        bids = GlobitexNormalizer._levels(raw.get("bids", []), descending=True)
        asks = GlobitexNormalizer._levels(raw.get("asks", []), descending=False)
        if limit is not None:
            bids, asks = bids[:limit], asks[:limit]

        logger.debug(
            "normalized_orderbook",
            exchange="globitex",
            symbol=symbol,
            bids_count=len(bids),
            asks_count=len(asks),
        )
        return OrderBook(
            symbol=symbol,
            timestamp=safe_integer(raw, "timestamp"),
            bids=bids,
            asks=asks,
        )

    @staticmethod
    def normalize_market(raw: Dict[str, Any]) -> Market:
        """
        Normalize a symbol definition.

        Example:
            >>> market = GlobitexNormalizer.normalize_market({
            ...     "symbol": "GBXETH", "priceIncrement": "0.0000001",
            ...     "sizeIncrement": "0.001", "sizeMin": "5",
            ...     "currency": "ETH", "commodity": "GBX",
            ... })
            >>> market.symbol
            'GBX/ETH'
        """
        base_id = safe_string(raw, "commodity")
        quote_id = safe_string(raw, "currency")
        base = base_id.upper() if base_id else ""
        quote = quote_id.upper() if quote_id else ""

        def positive(key: str) -> Optional[Decimal]:
            value = safe_decimal(raw, key)
            return value if value is not None and value > 0 else None

        return Market(
            id=str(raw["symbol"]),
            symbol=f"{base}/{quote}",
            base=base,
            quote=quote,
            base_id=base_id,
            quote_id=quote_id,
            amount_increment=positive("sizeIncrement"),
            price_increment=positive("priceIncrement"),
            min_amount=safe_decimal(raw, "sizeMin"),
            info=raw,
        )

    @staticmethod
    def normalize_account(raw: Dict[str, Any]) -> Account:
        return Account(
            id=str(raw["account"]),
            main=bool(raw.get("main", False)),
            info=raw,
        )

    @staticmethod
    def normalize_balance(response: Dict[str, Any], account_id: str) -> Balance:
        """
        Normalize the balances of one account from the accounts listing.

        ``free`` is the available amount, ``used`` the reserved amount and
        ``total`` their sum. An account missing from the listing yields an
        empty balance.
        """
        selected: Dict[str, Any] = {}
        for account in safe_value(response, "accounts", default=[]):
            if safe_string(account, "account") == account_id:
                selected = account
                break

        entries: Dict[str, BalanceEntry] = {}
        for row in safe_value(selected, "balance", default=[]):
            code = safe_string(row, "currency")
            if code is None:
                continue
            free = safe_decimal(row, "available")
            used = safe_decimal(row, "reserved")
            total = free + used if free is not None and used is not None else None
            entries[code.upper()] = BalanceEntry(free=free, used=used, total=total)

        return Balance(account=account_id, entries=entries, info=response)

    @staticmethod
    def normalize_withdraw_fee(raw: Dict[str, Any], code: str, is_fiat: bool) -> WithdrawFee:
        """
        Normalize a payout fee quote.

        Fiat quotes carry ``amount`` / ``minimum`` / ``maximum`` /
        ``percentage``; crypto quotes carry a recommended commission with a
        fee id and expiry.
        """
        if is_fiat:
            return WithdrawFee(
                currency=code,
                fee=safe_decimal(raw, "amount"),
                minimum=safe_decimal(raw, "minimum"),
                maximum=safe_decimal(raw, "maximum"),
                percentage=safe_decimal(raw, "percentage"),
                info=raw,
            )
        return WithdrawFee(
            currency=code,
            fee=safe_decimal(raw, "recommended", "recomended"),
            minimum=safe_decimal(raw, "minimum"),
            maximum=safe_decimal(raw, "maximum", "maxmimum"),
            fee_id=safe_string(raw, "feeId"),
            expire_time=safe_integer(raw, "feeExpireTime"),
            info=raw,
        )
