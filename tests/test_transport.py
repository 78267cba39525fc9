"""Tests for AiohttpTransport with an in-memory session."""

import asyncio

import aiohttp
import pytest

from tradebridge.errors import NetworkError, RateLimitExceeded, RequestTimeout
from tradebridge.transport import AiohttpTransport


class FakeResponse:
    def __init__(self, status=200, text="{}", headers=None):
        self.status = status
        self.headers = headers or {"Content-Type": "application/json"}
        self._text = text

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession and records requests."""

    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse()
        self.error = error
        self.requests = []
        self.closed = False

    def request(self, method, url, headers=None, data=None):
        self.requests.append((method, url, headers, data))
        if self.error is not None:
            raise self.error
        return self.response

    async def close(self):
        self.closed = True


def make_transport(session: FakeSession) -> AiohttpTransport:
    transport = AiohttpTransport("globitex", rate_limit_per_second=100, timeout_seconds=5)
    transport._session = session
    return transport


class TestAiohttpTransport:
    @pytest.mark.asyncio
    async def test_successful_request(self):
        session = FakeSession(FakeResponse(status=200, text='{"timestamp": 1}'))
        transport = make_transport(session)

        response = await transport.send(
            "POST", "https://example/api", headers={"X-Nonce": "1"}, body="a=1"
        )

        assert response.ok
        assert response.text == '{"timestamp": 1}'
        assert response.headers["Content-Type"] == "application/json"
        assert session.requests == [("POST", "https://example/api", {"X-Nonce": "1"}, "a=1")]

    @pytest.mark.asyncio
    async def test_error_status_is_returned(self):
        transport = make_transport(FakeSession(FakeResponse(status=500, text="oops")))

        response = await transport.send("GET", "https://example/api")

        assert not response.ok
        assert response.status == 500

    @pytest.mark.asyncio
    async def test_rate_limited(self):
        response = FakeResponse(status=429, text="", headers={"Retry-After": "3"})
        transport = make_transport(FakeSession(response))

        with pytest.raises(RateLimitExceeded, match="retry after 3s"):
            await transport.send("GET", "https://example/api")

    @pytest.mark.asyncio
    async def test_client_error_becomes_network_error(self):
        session = FakeSession(error=aiohttp.ClientConnectionError("refused"))
        transport = make_transport(session)

        with pytest.raises(NetworkError) as exc_info:
            await transport.send("GET", "https://example/api")

        assert exc_info.value.exchange == "globitex"
        assert len(session.requests) == 1

    @pytest.mark.asyncio
    async def test_timeout(self):
        transport = make_transport(FakeSession(error=asyncio.TimeoutError()))

        with pytest.raises(RequestTimeout):
            await transport.send("GET", "https://example/api")

    @pytest.mark.asyncio
    async def test_close(self):
        session = FakeSession()
        transport = make_transport(session)

        await transport.close()
        await transport.close()

        assert session.closed

    @pytest.mark.asyncio
    async def test_requests_are_spaced(self):
        transport = AiohttpTransport("globitex", rate_limit_per_second=20)
        transport._session = FakeSession()
        loop = asyncio.get_running_loop()

        start = loop.time()
        await transport.send("GET", "https://example/a")
        await transport.send("GET", "https://example/b")

        assert loop.time() - start >= 0.04
