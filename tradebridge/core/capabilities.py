"""
Adapter capability flags.

Each adapter declares the unified operations it implements natively
(``capabilities``) and those it derives from other calls (``emulated``).
Composite operations consult these before issuing any request so that an
unsupported call fails with NotSupported instead of an exchange error.

Example:
    >>> class MyAdapter(ExchangeAdapter):
    ...     capabilities = frozenset({Capability.CREATE_ORDER, Capability.CANCEL_ORDER})
    ...     emulated = frozenset({Capability.EDIT_ORDER})
"""

from enum import Enum


class Capability(str, Enum):
    """Unified operations an adapter may support."""

    # Public market data
    FETCH_TIME = "fetch_time"
    FETCH_MARKETS = "fetch_markets"
    FETCH_CURRENCIES = "fetch_currencies"
    FETCH_TICKER = "fetch_ticker"
    FETCH_TICKERS = "fetch_tickers"
    FETCH_ORDER_BOOK = "fetch_order_book"
    FETCH_TRADES = "fetch_trades"
    FETCH_OHLCV = "fetch_ohlcv"
    FETCH_MARK_OHLCV = "fetch_mark_ohlcv"
    FETCH_INDEX_OHLCV = "fetch_index_ohlcv"
    FETCH_PREMIUM_INDEX_OHLCV = "fetch_premium_index_ohlcv"
    FETCH_FUNDING_RATE = "fetch_funding_rate"
    FETCH_FUNDING_RATES = "fetch_funding_rates"
    FETCH_FUNDING_RATE_HISTORY = "fetch_funding_rate_history"
    FETCH_OPEN_INTEREST_HISTORY = "fetch_open_interest_history"
    FETCH_BORROW_INTEREST = "fetch_borrow_interest"

    # Account
    FETCH_ACCOUNTS = "fetch_accounts"
    FETCH_BALANCE = "fetch_balance"
    WITHDRAW = "withdraw"
    FETCH_WITHDRAW_FEE = "fetch_withdraw_fee"

    # Trading
    CREATE_ORDER = "create_order"
    CREATE_MARKET_ORDER = "create_market_order"
    CREATE_POST_ONLY_ORDER = "create_post_only_order"
    CREATE_REDUCE_ONLY_ORDER = "create_reduce_only_order"
    CREATE_STOP_ORDER = "create_stop_order"
    CREATE_STOP_LIMIT_ORDER = "create_stop_limit_order"
    CREATE_STOP_MARKET_ORDER = "create_stop_market_order"
    EDIT_ORDER = "edit_order"
    CANCEL_ORDER = "cancel_order"
    CANCEL_ALL_ORDERS = "cancel_all_orders"
    FETCH_ORDER = "fetch_order"
    FETCH_ORDERS = "fetch_orders"
    FETCH_OPEN_ORDERS = "fetch_open_orders"
    FETCH_CLOSED_ORDERS = "fetch_closed_orders"
    FETCH_MY_TRADES = "fetch_my_trades"
