"""
Globitex request signing.

Private endpoints are authenticated with three headers:

    X-API-Key:   the API key
    X-Nonce:     strictly increasing millisecond nonce
    X-Signature: hex HMAC-SHA512(secret, api_key + "&" + nonce + url_path [+ "?" + query])

where ``url_path`` is the request path below the host (e.g.
``/api/1/trading/new_order``) and ``query`` is the urlencoded parameter
set. Public endpoints are sent unsigned.
"""

import hashlib
import hmac
import re
from typing import Any, Dict, Mapping, Optional, Tuple
from urllib.parse import quote, urlencode, urlparse

import structlog

from tradebridge.config.models import ApiEndpoints, Credentials
from tradebridge.core.context import RequestContext, SignedRequest
from tradebridge.core.nonce import MonotonicNonce
from tradebridge.errors import ArgumentsRequired, AuthenticationError, ExchangeError

logger = structlog.get_logger(__name__)

PATH_PARAM = re.compile(r"\{([^}]+)\}")


def implode_path(
    path: str,
    params: Mapping[str, Any],
    exchange: Optional[str] = None,
    operation: Optional[str] = None,
) -> Tuple[str, Dict[str, Any]]:
    """
    Substitute ``{name}`` placeholders and return the remaining query.

    Example:
        >>> implode_path("ticker/{symbol}", {"symbol": "BTCEUR", "x": 1})
        ('ticker/BTCEUR', {'x': 1})
    """
    names = PATH_PARAM.findall(path)
    for name in names:
        if params.get(name) is None:
            raise ArgumentsRequired(
                f"requires a {name} argument", exchange=exchange, operation=operation
            )
        path = path.replace("{" + name + "}", quote(str(params[name]), safe=""))
    query = {k: v for k, v in params.items() if k not in names}
    return path, query


class GlobitexSigner:
    """
    Signs Globitex requests.

    One signer (and therefore one nonce source) exists per adapter
    instance, so every request made with the same credentials draws from
    the same strictly increasing sequence.

    Example:
        >>> signer = GlobitexSigner(credentials, endpoints)
        >>> signed = signer.sign(context)
        >>> signed.headers["X-Nonce"]
        '1612088909341'
    """

    def __init__(
        self,
        credentials: Credentials,
        endpoints: ApiEndpoints,
        nonce: Optional[MonotonicNonce] = None,
        exchange: str = "globitex",
    ):
        self._credentials = credentials
        self._endpoints = endpoints
        self._nonce = nonce or MonotonicNonce()
        self.exchange = exchange

    def _check_credentials(self, operation: Optional[str]) -> None:
        if not self._credentials.is_complete:
            raise AuthenticationError(
                "requires apiKey and secret credentials",
                exchange=self.exchange,
                operation=operation,
            )

    def _secret(self, operation: Optional[str]) -> str:
        self._check_credentials(operation)
        return self._credentials.secret.get_secret_value()  # type: ignore[union-attr]

    def sign_message(self, message: str, operation: Optional[str] = None) -> str:
        """Hex HMAC-SHA512 of message with the API secret."""
        digest = hmac.new(
            self._secret(operation).encode("utf-8"),
            message.encode("utf-8"),
            hashlib.sha512,
        )
        return digest.hexdigest()

    def sign(self, context: RequestContext) -> SignedRequest:
        """
        Build the transport request for a context.

        GET parameters go to the query string; POST parameters form a
        urlencoded body. Private requests also get the auth headers and a
        context carrying the nonce and signature used.

        Raises:
            AuthenticationError: Private request without credentials.
            ExchangeError: No base URL configured for the API section.
        """
        base_url = self._endpoints.get(context.api.value)
        if not base_url:
            raise ExchangeError(
                f"no base URL configured for the {context.api.value} API",
                exchange=self.exchange,
                operation=context.operation,
            )

        path, query = implode_path(
            context.path, context.params, exchange=self.exchange, operation=context.operation
        )
        encoded = urlencode(query) if query else ""
        suffix = f"?{encoded}" if encoded else ""

        url = base_url + path
        body: Optional[str] = None
        if context.method == "GET":
            url += suffix
        else:
            body = encoded

        headers: Dict[str, str] = {}
        if context.is_private:
            self._check_credentials(context.operation)
            nonce = str(self._nonce.next())
            url_path = urlparse(base_url).path + path
            message = f"{self._credentials.api_key}&{nonce}{url_path}{suffix}"
            signature = self.sign_message(message, context.operation)
            headers = {
                "Content-Type": "application/x-www-form-urlencoded",
                "X-API-Key": str(self._credentials.api_key),
                "X-Nonce": nonce,
                "X-Signature": signature,
            }
            context = context.model_copy(update={"nonce": nonce, "signature": signature})
            logger.debug(
                "request_signed",
                exchange=self.exchange,
                operation=context.operation,
                nonce=nonce,
            )
        elif body is not None:
            headers = {"Content-Type": "application/x-www-form-urlencoded"}

        return SignedRequest(
            url=url,
            method=context.method,
            headers=headers,
            body=body,
            context=context,
        )
