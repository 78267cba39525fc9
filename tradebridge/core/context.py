"""
Per-call request models.

A RequestContext is created by an adapter's request builder for exactly one
call, completed by the signer (nonce, signature) and discarded after the
response is normalized. It is never cached or shared between calls.

Models:
    ApiSection: Enum of API sections (public, private)
    RequestContext: Endpoint, merged parameters and resolved account of one call
    SignedRequest: Transport-ready URL, headers and body
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ApiSection(str, Enum):
    """API section an endpoint belongs to. Private endpoints are signed."""

    PUBLIC = "public"
    PRIVATE = "private"


class RequestContext(BaseModel):
    """
    Everything needed to sign and send one request.

    Attributes:
        operation: Unified operation that created the request.
        path: Endpoint path template (e.g., "ticker/{symbol}").
        api: API section.
        method: HTTP method.
        params: Merged wire parameters, routing keys already removed.
        account_id: Resolved trading account, for private calls.
        nonce: Nonce used to sign the request.
        signature: Request signature.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    operation: str = Field(..., min_length=1)
    path: str = Field(..., min_length=1)
    api: ApiSection = Field(default=ApiSection.PUBLIC)
    method: str = Field(default="GET")
    params: Dict[str, Any] = Field(default_factory=dict)
    account_id: Optional[str] = Field(default=None)
    nonce: Optional[str] = Field(default=None)
    signature: Optional[str] = Field(default=None)

    @property
    def is_private(self) -> bool:
        """Check if the request must be signed."""
        return self.api == ApiSection.PRIVATE


class SignedRequest(BaseModel):
    """Transport-ready request."""

    model_config = {"frozen": True, "extra": "forbid"}

    url: str = Field(..., min_length=1)
    method: str = Field(default="GET")
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Optional[str] = Field(default=None)
    context: RequestContext
