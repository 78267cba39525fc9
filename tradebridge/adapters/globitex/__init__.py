"""
Globitex exchange adapter.

This package provides Globitex REST integration: request building, request
signing, response normalization and the adapter tying them together.

Components:
    - GlobitexRequestBuilder: Builds request contexts and validates arguments
    - GlobitexSigner: HMAC-SHA512 request signing with a monotonic nonce
    - GlobitexNormalizer: Data format converter
    - GlobitexAdapter: Main adapter implementing ExchangeAdapter interface

Example:
    >>> from tradebridge.adapters.globitex import GlobitexAdapter
    >>> from tradebridge.config import load_config
    >>>
    >>> config = load_config()
    >>> adapter = GlobitexAdapter(config.get_exchange("globitex"))
    >>> markets = await adapter.load_markets()
"""

from tradebridge.adapters.globitex.adapter import GlobitexAdapter
from tradebridge.adapters.globitex.normalizer import GlobitexNormalizer
from tradebridge.adapters.globitex.requests import GlobitexRequestBuilder
from tradebridge.adapters.globitex.signer import GlobitexSigner

__all__ = [
    "GlobitexAdapter",
    "GlobitexNormalizer",
    "GlobitexRequestBuilder",
    "GlobitexSigner",
]
