"""
Shared Pydantic data models.

All models are frozen value objects created fresh by every normalization
call. All financial values use Decimal.

Modules:
    market: Markets, currencies and accounts
    order: Unified orders, sides, statuses and time-in-force
    trade: Unified trades and fees
    ticker: Unified tickers
    orderbook: Order books and price levels
    balance: Account balances
    derivatives: Candles, funding rates, open interest, borrow interest
    transfer: Withdrawals and withdrawal fees
    params: Typed parameter sets for order placement and payouts

Example:
    >>> from tradebridge.models import UnifiedOrder, OrderStatus, UnifiedTrade
"""

# Market metadata
from tradebridge.models.market import Account, Currency, Market, MarketType

# Orders and trades
from tradebridge.models.order import OrderSide, OrderStatus, TimeInForce, UnifiedOrder
from tradebridge.models.trade import TradeFee, UnifiedTrade

# Market data
from tradebridge.models.orderbook import OrderBook, PriceLevel
from tradebridge.models.ticker import UnifiedTicker

# Account data
from tradebridge.models.balance import Balance, BalanceEntry
from tradebridge.models.transfer import Withdrawal, WithdrawFee

# Operation parameters
from tradebridge.models.params import OrderParams, WithdrawParams

# Derivatives
from tradebridge.models.derivatives import (
    BorrowInterest,
    Candle,
    FundingRate,
    FundingRateHistory,
    OpenInterest,
)

__all__ = [
    # Market metadata
    "Account",
    "Currency",
    "Market",
    "MarketType",
    # Orders and trades
    "OrderSide",
    "OrderStatus",
    "TimeInForce",
    "UnifiedOrder",
    "TradeFee",
    "UnifiedTrade",
    # Market data
    "OrderBook",
    "PriceLevel",
    "UnifiedTicker",
    # Account data
    "Balance",
    "BalanceEntry",
    "Withdrawal",
    "WithdrawFee",
    # Operation parameters
    "OrderParams",
    "WithdrawParams",
    # Derivatives
    "BorrowInterest",
    "Candle",
    "FundingRate",
    "FundingRateHistory",
    "OpenInterest",
]
