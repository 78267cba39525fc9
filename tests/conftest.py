"""
Shared pytest fixtures.

Adapters are exercised against FakeTransport, which answers requests from
canned payloads keyed by HTTP method and URL path and records everything
it was asked to send.
"""

import json
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qsl, urlparse

import pytest

from tradebridge.adapters.globitex import GlobitexAdapter
from tradebridge.config.models import Credentials, ExchangeConfig
from tradebridge.core.nonce import MonotonicNonce
from tradebridge.transport.base import Transport, TransportResponse

FIXED_NOW_MS = 1612088909341

SYMBOLS_PAYLOAD = {
    "symbols": [
        {
            "symbol": "BTCEUR",
            "priceIncrement": "0.01",
            "sizeIncrement": "0.00001",
            "sizeMin": "0.00001",
            "currency": "EUR",
            "commodity": "BTC",
        },
        {
            "symbol": "GBXETH",
            "priceIncrement": "0.0000001",
            "sizeIncrement": "0.001",
            "sizeMin": "5",
            "currency": "ETH",
            "commodity": "GBX",
        },
    ]
}

ACCOUNTS_PAYLOAD = {
    "accounts": [
        {
            "account": "AFN561A01",
            "main": True,
            "balance": [
                {"currency": "EUR", "available": "100.0", "reserved": "0.0"},
                {"currency": "BTC", "available": "1.00000002", "reserved": "0.5"},
            ],
        },
        {
            "account": "AFN561A02",
            "main": False,
            "balance": [
                {"currency": "EUR", "available": "120.0", "reserved": "0.0"},
            ],
        },
    ]
}


class SentRequest:
    """A request captured by FakeTransport."""

    def __init__(self, method: str, url: str, headers: Dict[str, str], body: Optional[str]):
        self.method = method
        self.url = url
        self.headers = headers
        self.body = body

    @property
    def path(self) -> str:
        return urlparse(self.url).path

    @property
    def query(self) -> Dict[str, str]:
        return dict(parse_qsl(urlparse(self.url).query))

    @property
    def form(self) -> Dict[str, str]:
        return dict(parse_qsl(self.body or ""))


class FakeTransport(Transport):
    """In-memory transport answering from canned responses."""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], List[TransportResponse]] = {}
        self.sent: List[SentRequest] = []
        self.closed = False

    def add(
        self,
        method: str,
        path: str,
        payload: Any = None,
        status: int = 200,
        text: Optional[str] = None,
    ) -> None:
        """Queue a response; the last response for a route is reused."""
        body = text if text is not None else json.dumps(payload)
        self.routes.setdefault((method, path), []).append(
            TransportResponse(status=status, text=body)
        )

    async def send(self, method, url, headers=None, body=None):
        request = SentRequest(method, url, dict(headers or {}), body)
        self.sent.append(request)
        queue = self.routes.get((method, request.path))
        if not queue:
            raise AssertionError(f"unexpected request {method} {url}")
        if len(queue) > 1:
            return queue.pop(0)
        return queue[0]

    async def close(self) -> None:
        self.closed = True

    def requests_to(self, path: str) -> List[SentRequest]:
        return [r for r in self.sent if r.path == path]


@pytest.fixture
def transport() -> FakeTransport:
    fake = FakeTransport()
    fake.add("GET", "/api/1/public/symbols", SYMBOLS_PAYLOAD)
    fake.add("GET", "/api/1/payment/accounts", ACCOUNTS_PAYLOAD)
    return fake


@pytest.fixture
def exchange_config() -> ExchangeConfig:
    return ExchangeConfig(credentials=Credentials(api_key="test-key", secret="test-secret"))


@pytest.fixture
def adapter(exchange_config: ExchangeConfig, transport: FakeTransport) -> GlobitexAdapter:
    return GlobitexAdapter(
        exchange_config,
        transport,
        nonce=MonotonicNonce(clock=lambda: FIXED_NOW_MS),
    )
