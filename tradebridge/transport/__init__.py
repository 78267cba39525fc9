"""
HTTP transport collaborators.

Components:
    - Transport: Abstract send(method, url, headers, body) interface
    - TransportResponse: Raw status, headers and body text
    - AiohttpTransport: aiohttp implementation with throttling and timeouts
"""

from tradebridge.transport.aiohttp_client import AiohttpTransport
from tradebridge.transport.base import Transport, TransportResponse

__all__ = [
    "AiohttpTransport",
    "Transport",
    "TransportResponse",
]
