"""
Transport collaborator interface.

Adapters never talk to the network directly. They hand a fully signed
request to a Transport and interpret the TransportResponse themselves, so
HTTP status mapping and envelope parsing stay exchange-specific while
connection handling, throttling and timeouts stay here.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

from pydantic import BaseModel, Field


class TransportResponse(BaseModel):
    """Raw HTTP response as returned by a transport."""

    model_config = {"frozen": True, "extra": "forbid"}

    status: int = Field(..., ge=100, le=599)
    headers: Dict[str, str] = Field(default_factory=dict)
    text: str = Field(default="")

    @property
    def ok(self) -> bool:
        """Check if the status is 2xx."""
        return 200 <= self.status < 300


class Transport(ABC):
    """
    Abstract HTTP transport.

    Implementations must not retry: a failed or timed-out send surfaces to
    the caller immediately.
    """

    @abstractmethod
    async def send(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[str] = None,
    ) -> TransportResponse:
        """
        Send one HTTP request.

        Args:
            method: HTTP method (GET, POST).
            url: Absolute URL including any query string.
            headers: Request headers.
            body: Encoded request body.

        Returns:
            TransportResponse: Status, headers and body text.

        Raises:
            NetworkError: If the request could not be completed.
            RequestTimeout: If the request timed out.
            RateLimitExceeded: If the exchange answered HTTP 429.
        """
        pass

    async def close(self) -> None:
        """Release network resources. Safe to call more than once."""
        return None
