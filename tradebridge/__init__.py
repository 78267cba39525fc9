"""
Unified trading layer over heterogeneous crypto exchange APIs.

Calls are expressed in one exchange-agnostic vocabulary (symbols, order
types, sides, amounts) and translated into exchange-specific signed HTTP
requests. Exchange responses are normalized back into a common order,
trade and ticker schema.

This package provides:
- Frozen Pydantic models for orders, trades, tickers, markets and balances
- Parameter normalization and order-type resolution shared by all adapters
- Composite operations (edit, stop, post-only, funding rate) built from primitives
- Exchange adapters with request building, signing and response normalization
- Configuration management and an aiohttp transport
"""

__version__ = "0.1.0"
