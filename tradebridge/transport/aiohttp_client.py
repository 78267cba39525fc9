"""
aiohttp transport.

One lazily opened ClientSession per transport. Outgoing requests are
spaced ``1 / rate_limit_per_second`` apart, also across concurrent
callers. Nothing is retried: HTTP 429, timeouts and connection failures
are raised as typed errors and every other status is returned to the
adapter for envelope handling.
"""

import asyncio
from typing import Dict, Optional

import aiohttp
import structlog

from tradebridge.errors import NetworkError, RateLimitExceeded, RequestTimeout
from tradebridge.transport.base import Transport, TransportResponse

logger = structlog.get_logger(__name__)

HTTP_TOO_MANY_REQUESTS = 429


class AiohttpTransport(Transport):
    """
    Transport backed by ``aiohttp.ClientSession``.

    Example:
        >>> transport = AiohttpTransport("globitex", rate_limit_per_second=5)
        >>> response = await transport.send("GET", "https://api.globitex.com/api/1/public/time")
        >>> await transport.close()
    """

    def __init__(
        self,
        exchange: str,
        rate_limit_per_second: int = 10,
        timeout_seconds: int = 10,
        user_agent: str = "tradebridge/0.1",
    ):
        self.exchange = exchange
        self.rate_limit_per_second = rate_limit_per_second
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent

        self._session: Optional[aiohttp.ClientSession] = None
        self._spacing = 1.0 / rate_limit_per_second
        self._next_slot = 0.0
        self._slot_lock = asyncio.Lock()

    def _session_or_new(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                headers={"User-Agent": self.user_agent},
            )
            logger.debug("transport_session_opened", exchange=self.exchange)
        return self._session

    async def _wait_for_slot(self) -> None:
        loop = asyncio.get_running_loop()
        async with self._slot_lock:
            delay = self._next_slot - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)
            self._next_slot = loop.time() + self._spacing

    async def send(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[str] = None,
    ) -> TransportResponse:
        """
        Send one request.

        Raises:
            RateLimitExceeded: The exchange answered HTTP 429.
            RequestTimeout: No complete answer within ``timeout_seconds``.
            NetworkError: The connection failed.
        """
        await self._wait_for_slot()
        session = self._session_or_new()
        log = logger.bind(exchange=self.exchange, method=method, url=url)

        try:
            async with session.request(method, url, headers=headers, data=body) as response:
                text = await response.text()
                status = response.status
                response_headers = dict(response.headers.items())
        except asyncio.TimeoutError as e:
            log.warning("transport_timeout", timeout=self.timeout_seconds)
            raise RequestTimeout(
                f"no response within {self.timeout_seconds}s", exchange=self.exchange
            ) from e
        except aiohttp.ClientError as e:
            log.warning("transport_failed", error=str(e))
            raise NetworkError(f"request failed: {e}", exchange=self.exchange) from e

        if status == HTTP_TOO_MANY_REQUESTS:
            retry_after = response_headers.get("Retry-After", "unknown")
            log.warning("transport_rate_limited", retry_after=retry_after)
            raise RateLimitExceeded(
                f"rate limited, retry after {retry_after}s", exchange=self.exchange
            )

        log.debug("transport_response", status=status)
        return TransportResponse(status=status, headers=response_headers, text=text)

    async def close(self) -> None:
        """Close the session; safe to call more than once."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
            logger.debug("transport_session_closed", exchange=self.exchange)

    def __repr__(self) -> str:
        return f"AiohttpTransport(exchange={self.exchange!r}, rate_limit={self.rate_limit_per_second}/s)"
