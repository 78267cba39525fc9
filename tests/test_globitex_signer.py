"""Tests for Globitex request signing."""

import hashlib
import hmac

import pytest

from conftest import FIXED_NOW_MS
from tradebridge.adapters.globitex.signer import GlobitexSigner, implode_path
from tradebridge.config.models import ApiEndpoints, Credentials
from tradebridge.core.context import ApiSection, RequestContext
from tradebridge.core.nonce import MonotonicNonce
from tradebridge.errors import ArgumentsRequired, AuthenticationError, ExchangeError

ENDPOINTS = ApiEndpoints(
    public="https://api.globitex.com/api/1/public/",
    private="https://api.globitex.com/api/",
)


def expected_signature(message: str, secret: str = "test-secret") -> str:
    return hmac.new(secret.encode(), message.encode(), hashlib.sha512).hexdigest()


class TestImplodePath:
    def test_substitutes_and_removes_placeholders(self):
        path, query = implode_path("ticker/{symbol}", {"symbol": "BTCEUR", "x": 1})

        assert path == "ticker/BTCEUR"
        assert query == {"x": 1}

    def test_quotes_values(self):
        path, _ = implode_path("ticker/{symbol}", {"symbol": "A/B"})
        assert path == "ticker/A%2FB"

    def test_missing_placeholder_value(self):
        with pytest.raises(ArgumentsRequired) as exc_info:
            implode_path("ticker/{symbol}", {}, exchange="globitex", operation="fetch_ticker")

        assert exc_info.value.exchange == "globitex"
        assert exc_info.value.operation == "fetch_ticker"


class TestGlobitexSigner:
    def setup_method(self):
        self.nonce = MonotonicNonce(clock=lambda: FIXED_NOW_MS)
        self.signer = GlobitexSigner(
            Credentials(api_key="test-key", secret="test-secret"),
            ENDPOINTS,
            nonce=self.nonce,
        )

    def test_sign_message_is_hex_hmac_sha512(self):
        signature = self.signer.sign_message("hello")

        assert signature == expected_signature("hello")
        assert len(signature) == 128

    def test_private_get_signs_path_and_query(self):
        context = RequestContext(
            operation="fetch_open_orders",
            path="1/trading/orders/active",
            api=ApiSection.PRIVATE,
            params={"account": "AFN561A01", "symbols": "BTCEUR"},
        )

        signed = self.signer.sign(context)

        query = "account=AFN561A01&symbols=BTCEUR"
        assert signed.url == f"https://api.globitex.com/api/1/trading/orders/active?{query}"
        assert signed.body is None
        assert signed.headers["X-API-Key"] == "test-key"
        assert signed.headers["X-Nonce"] == str(FIXED_NOW_MS)
        assert signed.headers["X-Signature"] == expected_signature(
            f"test-key&{FIXED_NOW_MS}/api/1/trading/orders/active?{query}"
        )
        assert signed.context.nonce == str(FIXED_NOW_MS)
        assert signed.context.signature == signed.headers["X-Signature"]

    def test_private_post_sends_form_body(self):
        context = RequestContext(
            operation="cancel_order",
            path="2/trading/cancel_order",
            api=ApiSection.PRIVATE,
            method="POST",
            params={"clientOrderId": "abc", "account": "AFN561A01"},
        )

        signed = self.signer.sign(context)

        body = "clientOrderId=abc&account=AFN561A01"
        assert signed.url == "https://api.globitex.com/api/2/trading/cancel_order"
        assert signed.body == body
        assert signed.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert signed.headers["X-Signature"] == expected_signature(
            f"test-key&{FIXED_NOW_MS}/api/2/trading/cancel_order?{body}"
        )

    def test_nonces_strictly_increase(self):
        context = RequestContext(
            operation="fetch_balance",
            path="1/payment/accounts",
            api=ApiSection.PRIVATE,
        )

        first = self.signer.sign(context)
        second = self.signer.sign(context)

        assert int(second.headers["X-Nonce"]) == int(first.headers["X-Nonce"]) + 1

    def test_public_request_is_unsigned(self):
        context = RequestContext(
            operation="fetch_ticker",
            path="ticker/{symbol}",
            params={"symbol": "BTCEUR"},
        )

        signed = self.signer.sign(context)

        assert signed.url == "https://api.globitex.com/api/1/public/ticker/BTCEUR"
        assert signed.headers == {}
        assert signed.context.nonce is None
        assert self.nonce.last == 0

    def test_missing_credentials_fail_before_nonce(self):
        nonce = MonotonicNonce(clock=lambda: FIXED_NOW_MS)
        signer = GlobitexSigner(Credentials(api_key="key"), ENDPOINTS, nonce=nonce)
        context = RequestContext(
            operation="fetch_balance",
            path="1/payment/accounts",
            api=ApiSection.PRIVATE,
        )

        with pytest.raises(AuthenticationError) as exc_info:
            signer.sign(context)

        assert exc_info.value.operation == "fetch_balance"
        assert nonce.last == 0

    def test_missing_base_url(self):
        signer = GlobitexSigner(
            Credentials(api_key="key", secret="s"),
            ApiEndpoints(public="https://api.globitex.com/api/1/public/"),
        )
        context = RequestContext(
            operation="fetch_balance",
            path="1/payment/accounts",
            api=ApiSection.PRIVATE,
        )

        with pytest.raises(ExchangeError):
            signer.sign(context)
