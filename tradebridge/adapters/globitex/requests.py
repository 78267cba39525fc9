"""
Globitex request builder.

Turns unified call arguments into RequestContext objects for the Globitex
REST API. The builder performs every argument check that does not need the
network, so an invalid order or payout is rejected before anything is sent.
It never performs I/O: markets and account ids arrive already resolved.

Globitex Endpoints:
    Public (https://api.globitex.com/api/1/public/):
        time, symbols, ticker, ticker/{symbol}, orderbook/{symbol},
        trades/{symbol}, trades/recent/{symbol}
    Private (https://api.globitex.com/api/):
        GET  2/trading/orders/active, 1/trading/orders/recent,
             1/trading/order, 1/trading/trades, 1/payment/accounts,
             1/payment/payout/fee/fiat, 1/payment/payout/fee/crypto
        POST 1/trading/new_order, 2/trading/cancel_order,
             1/trading/cancel_orders, 1/payment/payout/crypto,
             1/payment/payout/bank
"""

import uuid
from decimal import Decimal
from typing import Any, Dict, Mapping, NamedTuple, Optional

import structlog

from tradebridge.config.models import ExchangeOptions
from tradebridge.core.context import ApiSection, RequestContext
from tradebridge.core.order_type import check_order_arguments, resolve_post_only
from tradebridge.core.params import extend, extract_withdraw_tag, omit
from tradebridge.core.precision import amount_to_precision, price_to_precision
from tradebridge.core.safe import safe_string, safe_value, to_decimal
from tradebridge.errors import ArgumentsRequired, BadRequest, InvalidOrder, NotSupported
from tradebridge.models.market import Currency, Market
from tradebridge.models.params import OrderParams, WithdrawParams

logger = structlog.get_logger(__name__)


class Endpoint(NamedTuple):
    """REST endpoint: API section, HTTP method and path template."""

    api: ApiSection
    method: str
    path: str


ENDPOINTS: Dict[str, Endpoint] = {
    # Public
    "time": Endpoint(ApiSection.PUBLIC, "GET", "time"),
    "symbols": Endpoint(ApiSection.PUBLIC, "GET", "symbols"),
    "ticker": Endpoint(ApiSection.PUBLIC, "GET", "ticker/{symbol}"),
    "tickers": Endpoint(ApiSection.PUBLIC, "GET", "ticker"),
    "orderbook": Endpoint(ApiSection.PUBLIC, "GET", "orderbook/{symbol}"),
    "trades": Endpoint(ApiSection.PUBLIC, "GET", "trades/{symbol}"),
    "recent_trades": Endpoint(ApiSection.PUBLIC, "GET", "trades/recent/{symbol}"),
    # Private
    "active_orders": Endpoint(ApiSection.PRIVATE, "GET", "2/trading/orders/active"),
    "recent_orders": Endpoint(ApiSection.PRIVATE, "GET", "1/trading/orders/recent"),
    "order": Endpoint(ApiSection.PRIVATE, "GET", "1/trading/order"),
    "my_trades": Endpoint(ApiSection.PRIVATE, "GET", "1/trading/trades"),
    "accounts": Endpoint(ApiSection.PRIVATE, "GET", "1/payment/accounts"),
    "payout_fee_fiat": Endpoint(ApiSection.PRIVATE, "GET", "1/payment/payout/fee/fiat"),
    "payout_fee_crypto": Endpoint(ApiSection.PRIVATE, "GET", "1/payment/payout/fee/crypto"),
    "new_order": Endpoint(ApiSection.PRIVATE, "POST", "1/trading/new_order"),
    "cancel_order": Endpoint(ApiSection.PRIVATE, "POST", "2/trading/cancel_order"),
    "cancel_orders": Endpoint(ApiSection.PRIVATE, "POST", "1/trading/cancel_orders"),
    "payout_crypto": Endpoint(ApiSection.PRIVATE, "POST", "1/payment/payout/crypto"),
    "payout_bank": Endpoint(ApiSection.PRIVATE, "POST", "1/payment/payout/bank"),
}

STOP_ORDER_TYPES = ("stop", "stopLimit")
PRICED_ORDER_TYPES = ("limit", "stopLimit")
CLOSED_ORDER_STATUSES = "filled,canceled,expired,suspended"
INTERNATIONAL_PAYMENT_TYPES = ("international", "internacional")


class GlobitexRequestBuilder:
    """
    Builds RequestContexts for Globitex calls.

    Attributes:
        exchange: Adapter id, used in errors.
        options: Adapter option context.

    Example:
        >>> builder = GlobitexRequestBuilder("globitex", ExchangeOptions(), signer)
        >>> context = builder.ticker(market)
        >>> context.path
        'ticker/{symbol}'
    """

    def __init__(self, exchange: str, options: ExchangeOptions, signer):
        """
        Initialize builder.

        Args:
            exchange: Adapter id.
            options: Adapter option context.
            signer: Signer providing ``sign_message`` for payout signatures.
        """
        self.exchange = exchange
        self.options = options
        self._signer = signer

    def _context(
        self,
        operation: str,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        account_id: Optional[str] = None,
    ) -> RequestContext:
        route = ENDPOINTS[endpoint]
        return RequestContext(
            operation=operation,
            path=route.path,
            api=route.api,
            method=route.method,
            params=dict(params or {}),
            account_id=account_id,
        )

    def is_fiat(self, code: str) -> bool:
        """Check if a currency is paid out by bank transfer."""
        return code.upper() in self.options.fiat_currencies

    # -------------------------------------------------------------------------
    # Public
    # -------------------------------------------------------------------------

    def time(self, params: Optional[Dict[str, Any]] = None) -> RequestContext:
        return self._context("fetch_time", "time", params)

    def symbols(self, params: Optional[Dict[str, Any]] = None) -> RequestContext:
        return self._context("fetch_markets", "symbols", params)

    def ticker(self, market: Market, params: Optional[Dict[str, Any]] = None) -> RequestContext:
        return self._context("fetch_ticker", "ticker", extend({"symbol": market.id}, params))

    def tickers(self, params: Optional[Dict[str, Any]] = None) -> RequestContext:
        return self._context("fetch_tickers", "tickers", params)

    def order_book(
        self, market: Market, params: Optional[Dict[str, Any]] = None
    ) -> RequestContext:
        return self._context(
            "fetch_order_book", "orderbook", extend({"symbol": market.id}, params)
        )

    def trades(
        self,
        market: Market,
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> RequestContext:
        """
        Public trade history.

        With ``since`` the ranged endpoint is queried by timestamp, otherwise
        the most recent trades are requested.
        """
        max_results = limit or self.options.max_results
        request: Dict[str, Any] = {
            "symbol": market.id,
            "formatItem": "object",
            "maxResults": max_results,
        }
        if since is None:
            return self._context("fetch_trades", "recent_trades", extend(request, params))

        request.update({"by": "ts", "from": since, "startIndex": 0})
        return self._context("fetch_trades", "trades", extend(request, params))

    # -------------------------------------------------------------------------
    # Account
    # -------------------------------------------------------------------------

    def accounts(
        self, operation: str = "fetch_accounts", params: Optional[Dict[str, Any]] = None
    ) -> RequestContext:
        return self._context(operation, "accounts", omit(params, "account"))

    # -------------------------------------------------------------------------
    # Trading
    # -------------------------------------------------------------------------

    def create_order(
        self,
        market: Market,
        type: str,
        side: str,
        amount: Any,
        price: Any,
        account_id: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> RequestContext:
        """
        Build a new-order request.

        Args:
            market: Resolved market.
            type: "limit", "market", "stop", "stopLimit" or "postOnly".
            side: "buy" or "sell".
            amount: Order quantity.
            price: Limit price (required for limit and stopLimit).
            account_id: Resolved trading account.
            params: Extra parameters. Recognized keys: ``timeInForce``,
                ``expireTime``, ``stopPrice`` / ``stop_price``,
                ``clientOrderId``, ``postOnly``.

        Returns:
            RequestContext: The new_order request.

        Raises:
            ArgumentsRequired: Missing amount, price or stop price.
            InvalidOrder: Contradictory parameters, GTD without expireTime,
                a non-numeric stop price, or an amount that truncates to zero
                or falls below the market minimum.
            NotSupported: Post-only requested.
        """
        amount_value = check_order_arguments(type, amount, price, exchange=self.exchange)
        order_type, post_only, _, query = resolve_post_only(
            type, None, False, params, exchange=self.exchange
        )
        if post_only:
            raise NotSupported(
                "postOnly orders are not supported",
                exchange=self.exchange,
                operation="create_order",
            )

        options = OrderParams.from_params(query)
        if options.time_in_force == "GTD" and options.expire_time is None:
            raise InvalidOrder(
                "requires an expireTime param for a GTD order",
                exchange=self.exchange,
                operation="create_order",
            )

        raw_stop_price = options.stop_price
        if raw_stop_price is not None:
            if order_type == "market":
                order_type = "stop"
            elif order_type == "limit":
                order_type = "stopLimit"

        quantity = amount_to_precision(amount_value, market.amount_increment)
        if Decimal(quantity) <= 0:
            raise InvalidOrder(
                f"amount {amount_value} is below the {market.symbol} size increment "
                f"{market.amount_increment}",
                exchange=self.exchange,
                operation="create_order",
            )
        if market.min_amount is not None and Decimal(quantity) < market.min_amount:
            raise InvalidOrder(
                f"amount {quantity} is below the {market.symbol} minimum {market.min_amount}",
                exchange=self.exchange,
                operation="create_order",
            )

        request: Dict[str, Any] = {
            "account": account_id,
            "symbol": market.id,
            "side": side,
            "type": order_type,
            "quantity": quantity,
            "clientOrderId": options.client_order_id or uuid.uuid4().hex,
        }

        if order_type in STOP_ORDER_TYPES:
            if raw_stop_price is None:
                raise ArgumentsRequired(
                    f"requires a stopPrice param for a {order_type} order",
                    exchange=self.exchange,
                    operation="create_order",
                )
            stop_price = to_decimal(raw_stop_price)
            if stop_price is None:
                raise InvalidOrder(
                    f"stopPrice must be numeric, got {raw_stop_price!r}",
                    exchange=self.exchange,
                    operation="create_order",
                )
            request["stopPrice"] = price_to_precision(stop_price, market.price_increment)

        if order_type in PRICED_ORDER_TYPES:
            price_value = to_decimal(price)
            if price_value is None:
                raise ArgumentsRequired(
                    f"requires a numeric price for a {order_type} order",
                    exchange=self.exchange,
                    operation="create_order",
                )
            request["price"] = price_to_precision(price_value, market.price_increment)

        if options.time_in_force is not None:
            request["timeInForce"] = options.time_in_force
        if options.expire_time is not None:
            request["expireTime"] = options.expire_time

        return self._context(
            "create_order", "new_order", extend(request, options.extra), account_id
        )

    def cancel_order(
        self,
        client_order_id: Optional[str],
        account_id: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> RequestContext:
        """Cancel by client order id."""
        if not client_order_id:
            raise ArgumentsRequired(
                "requires a clientOrderId argument",
                exchange=self.exchange,
                operation="cancel_order",
            )
        request = {"clientOrderId": client_order_id, "account": account_id}
        return self._context(
            "cancel_order", "cancel_order", extend(request, omit(params, "account")), account_id
        )

    def cancel_all_orders(
        self,
        market: Optional[Market],
        account_id: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> RequestContext:
        request: Dict[str, Any] = {"account": account_id}
        if market is not None:
            request["symbols"] = market.id
        return self._context(
            "cancel_all_orders",
            "cancel_orders",
            extend(request, omit(params, "account")),
            account_id,
        )

    def fetch_order(
        self,
        client_order_id: Optional[str],
        account_id: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> RequestContext:
        """Look up one order by client order id (argument or params)."""
        client_order_id = client_order_id or safe_string(params, "clientOrderId", "client_oid")
        if not client_order_id:
            raise ArgumentsRequired(
                "requires a client order id",
                exchange=self.exchange,
                operation="fetch_order",
            )
        request = {"clientOrderId": client_order_id, "account": account_id}
        query = omit(params, "clientOrderId", "client_oid", "account")
        return self._context("fetch_order", "order", extend(request, query), account_id)

    def _order_listing(
        self,
        operation: str,
        endpoint: str,
        market: Optional[Market],
        account_id: str,
        params: Optional[Dict[str, Any]],
        defaults: Dict[str, Any],
    ) -> RequestContext:
        request: Dict[str, Any] = {"account": account_id}
        if market is not None:
            request["symbols"] = market.id
        for key, value in defaults.items():
            if safe_value(params, key) is None:
                request[key] = value
        return self._context(
            operation, endpoint, extend(request, omit(params, "account")), account_id
        )

    def fetch_orders(
        self,
        market: Optional[Market],
        account_id: str,
        params: Optional[Dict[str, Any]] = None,
        operation: str = "fetch_orders",
    ) -> RequestContext:
        return self._order_listing(
            operation,
            "recent_orders",
            market,
            account_id,
            params,
            {"maxResults": self.options.max_results},
        )

    def fetch_closed_orders(
        self,
        market: Optional[Market],
        account_id: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> RequestContext:
        query = extend({"statuses": CLOSED_ORDER_STATUSES}, params)
        return self.fetch_orders(market, account_id, query, operation="fetch_closed_orders")

    def fetch_open_orders(
        self,
        market: Optional[Market],
        account_id: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> RequestContext:
        return self._order_listing(
            "fetch_open_orders", "active_orders", market, account_id, params, {}
        )

    def fetch_my_trades(
        self,
        market: Optional[Market],
        account_id: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> RequestContext:
        return self._order_listing(
            "fetch_my_trades",
            "my_trades",
            market,
            account_id,
            params,
            {"by": "ts", "startIndex": 0, "maxResults": self.options.max_results},
        )

    # -------------------------------------------------------------------------
    # Payouts
    # -------------------------------------------------------------------------

    def check_withdraw(
        self,
        code: str,
        amount: Any,
        address: Optional[str],
        tag: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> WithdrawParams:
        """
        Validate payout arguments without building a request.

        Returns:
            WithdrawParams: Recognized payout fields plus passthrough keys.

        Raises:
            NotSupported: A destination tag was given.
            ArgumentsRequired: A mandatory payout field is missing.
            BadRequest: The address is malformed.
        """
        tag, query = extract_withdraw_tag(tag, params)
        if tag is not None:
            raise NotSupported(
                "does not support destination tags",
                exchange=self.exchange,
                operation="withdraw",
            )

        value = to_decimal(amount)
        if value is None or value <= 0:
            raise ArgumentsRequired(
                "amount should be above 0",
                exchange=self.exchange,
                operation="withdraw",
            )
        payout = WithdrawParams.from_params(query)
        self._require(payout.request_time, "requestTime")

        if self.is_fiat(code):
            self._check_bank_transfer(payout)
        else:
            if not address:
                raise ArgumentsRequired(
                    "requires an address argument",
                    exchange=self.exchange,
                    operation="withdraw",
                )
            if any(ch.isspace() for ch in address):
                raise BadRequest(
                    f"address is invalid: {address!r}",
                    exchange=self.exchange,
                    operation="withdraw",
                )
            self._require(payout.commission, "commission")
        return payout

    def _require(self, value: Optional[str], key: str, reason: str = "") -> None:
        if value is None:
            raise ArgumentsRequired(
                f"requires {key} parameter{reason}",
                exchange=self.exchange,
                operation="withdraw",
            )

    def _check_bank_transfer(self, payout: WithdrawParams) -> None:
        self._require(payout.payment_type, "paymentType")
        self._require(payout.beneficiary_account, "beneficiaryAccount")
        if payout.beneficiary_account_type == "other":
            self._require(
                payout.beneficiary_name,
                "beneficiaryName",
                " when beneficiaryAccountType is other",
            )
        if payout.payment_type.lower() in INTERNATIONAL_PAYMENT_TYPES:
            self._require(
                payout.beneficiary_swift_code,
                "beneficiarySwiftCode",
                " for international transfers",
            )
        if payout.intermediary_account is not None:
            self._require(
                payout.intermediary_swift_code,
                "intermediarySwiftCode",
                " when intermediaryAccount exists",
            )
        if payout.intermediary_swift_code is not None:
            self._require(
                payout.intermediary_account,
                "intermediaryAccount",
                " when intermediarySwiftCode exists",
            )

    def withdraw(
        self,
        currency: Currency,
        amount: Decimal,
        address: Optional[str],
        account_id: str,
        payout: WithdrawParams,
    ) -> RequestContext:
        """
        Build a bank or crypto payout request with its transaction signature.

        Fiat currencies go to the bank payout endpoint, everything else to
        the crypto payout endpoint. ``payout`` comes from ``check_withdraw``.
        """
        request = extend(
            {"currency": currency.id, "amount": str(amount)},
            payout.to_wire(),
            {"account": account_id},
        )

        if self.is_fiat(currency.code):
            message = "&".join(
                [
                    f"requestTime={payout.request_time}",
                    f"accountFrom={account_id}",
                    f"amount={request['amount']}",
                    f"currency={request['currency']}",
                    f"beneficiaryName={payout.beneficiary_name or ''}",
                    f"beneficiaryAccount={payout.beneficiary_account}",
                ]
            )
            endpoint = "payout_bank"
        else:
            request["address"] = address
            message = "&".join(
                [
                    f"requestTime={payout.request_time}",
                    f"amount={request['amount']}",
                    f"currency={request['currency']}",
                    f"account={account_id}",
                    f"address={address}",
                    f"commission={payout.commission}",
                ]
            )
            endpoint = "payout_crypto"

        request["transactionSignature"] = self._signer.sign_message(message, "withdraw")
        logger.debug(
            "withdraw_request_built",
            exchange=self.exchange,
            endpoint=endpoint,
            currency=currency.code,
        )
        return self._context("withdraw", endpoint, request, account_id)

    def withdraw_fee(
        self,
        currency: Currency,
        account_id: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> RequestContext:
        """
        Quote the payout fee for an amount.

        Raises:
            ArgumentsRequired: ``params["amount"]`` is missing.
        """
        amount = safe_value(params, "amount")
        if amount is None:
            raise ArgumentsRequired(
                "requires an amount parameter",
                exchange=self.exchange,
                operation="fetch_withdraw_fee",
            )
        request = {"currency": currency.id, "amount": str(amount), "account": account_id}
        endpoint = "payout_fee_fiat" if self.is_fiat(currency.code) else "payout_fee_crypto"
        query = omit(params, "amount", "account")
        return self._context("fetch_withdraw_fee", endpoint, extend(request, query), account_id)
