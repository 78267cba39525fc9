"""
Abstract interfaces for exchange adapters.

The key interface is ExchangeAdapter, which defines the contract for all
exchange-specific implementations and hosts the composite operations built
on top of their primitives. Capability flags describe which unified
operations an adapter offers.

Example:
    >>> from tradebridge.interfaces import Capability, ExchangeAdapter
    >>> class MyAdapter(ExchangeAdapter):
    ...     capabilities = frozenset({Capability.FETCH_TICKER})
    ...     @property
    ...     def exchange_name(self) -> str:
    ...         return "myexchange"
    ...     # ... implement other abstract methods

Modules:
    exchange_adapter: ExchangeAdapter ABC for exchange integrations
"""

from tradebridge.core.capabilities import Capability
from tradebridge.interfaces.exchange_adapter import ExchangeAdapter

__all__: list[str] = [
    "Capability",
    "ExchangeAdapter",
]
