"""
Exchange adapters.

Every adapter implements the ExchangeAdapter interface. Use create_adapter
to build one by its identifier.

Supported Exchanges:
    - Globitex (spot)

Example:
    >>> from tradebridge.adapters import create_adapter
    >>> adapter = create_adapter("globitex", config.get_exchange("globitex"))
"""

from typing import Dict, Optional, Type

from tradebridge.adapters.globitex import GlobitexAdapter
from tradebridge.config.models import ExchangeConfig
from tradebridge.errors import NotSupported
from tradebridge.interfaces.exchange_adapter import ExchangeAdapter
from tradebridge.transport.base import Transport

ADAPTERS: Dict[str, Type[ExchangeAdapter]] = {
    "globitex": GlobitexAdapter,
}


def create_adapter(
    name: str,
    config: Optional[ExchangeConfig] = None,
    transport: Optional[Transport] = None,
) -> ExchangeAdapter:
    """
    Create an adapter by exchange identifier.

    Args:
        name: Exchange identifier (e.g., "globitex").
        config: Exchange configuration; defaults apply when omitted.
        transport: HTTP transport; an aiohttp transport is used when omitted.

    Returns:
        ExchangeAdapter: A new adapter instance with its own caches and nonce.

    Raises:
        NotSupported: If no adapter exists for the name.
    """
    adapter_class = ADAPTERS.get(name.lower())
    if adapter_class is None:
        raise NotSupported(
            f"unknown exchange {name!r}, available: {sorted(ADAPTERS)}",
            operation="create_adapter",
        )
    return adapter_class(config, transport)


__all__ = [
    "ADAPTERS",
    "GlobitexAdapter",
    "create_adapter",
]
