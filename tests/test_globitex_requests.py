"""Tests for the Globitex request builder."""

import hashlib
import hmac
from decimal import Decimal

import pytest

from tradebridge.adapters.globitex.requests import (
    CLOSED_ORDER_STATUSES,
    GlobitexRequestBuilder,
)
from tradebridge.adapters.globitex.signer import GlobitexSigner
from tradebridge.config.models import ApiEndpoints, Credentials, ExchangeOptions
from tradebridge.core.context import ApiSection
from tradebridge.errors import (
    ArgumentsRequired,
    BadRequest,
    InvalidOrder,
    NotSupported,
)
from tradebridge.models import Currency, Market

BTCEUR = Market(
    id="BTCEUR",
    symbol="BTC/EUR",
    base="BTC",
    quote="EUR",
    amount_increment=Decimal("0.00001"),
    price_increment=Decimal("0.01"),
)
ACCOUNT = "AFN561A01"


def hmac_hex(message: str) -> str:
    return hmac.new(b"test-secret", message.encode(), hashlib.sha512).hexdigest()


@pytest.fixture
def builder() -> GlobitexRequestBuilder:
    signer = GlobitexSigner(
        Credentials(api_key="test-key", secret="test-secret"),
        ApiEndpoints(public="https://example/public/", private="https://example/"),
    )
    return GlobitexRequestBuilder("globitex", ExchangeOptions(max_results=50), signer)


class TestCreateOrder:
    def test_limit_order_fields(self, builder):
        context = builder.create_order(
            BTCEUR, "limit", "buy", "0.123456", "30000.005", ACCOUNT, {"clientOrderId": "cid-1"}
        )

        assert context.path == "1/trading/new_order"
        assert context.method == "POST"
        assert context.api == ApiSection.PRIVATE
        assert context.account_id == ACCOUNT
        assert context.params == {
            "account": ACCOUNT,
            "symbol": "BTCEUR",
            "side": "buy",
            "type": "limit",
            "quantity": "0.12345",
            "clientOrderId": "cid-1",
            "price": "30000.01",
        }

    def test_client_order_id_generated(self, builder):
        first = builder.create_order(BTCEUR, "market", "sell", Decimal("1"), None, ACCOUNT)
        second = builder.create_order(BTCEUR, "market", "sell", Decimal("1"), None, ACCOUNT)

        assert len(first.params["clientOrderId"]) == 32
        assert first.params["clientOrderId"] != second.params["clientOrderId"]
        assert "price" not in first.params

    def test_limit_without_price(self, builder):
        with pytest.raises(ArgumentsRequired):
            builder.create_order(BTCEUR, "limit", "buy", Decimal("1"), None, ACCOUNT)

    def test_amount_must_be_positive(self, builder):
        with pytest.raises(ArgumentsRequired):
            builder.create_order(BTCEUR, "market", "buy", Decimal("0"), None, ACCOUNT)

    def test_stop_price_promotes_limit(self, builder):
        context = builder.create_order(
            BTCEUR, "limit", "sell", Decimal("1"), Decimal("100"), ACCOUNT, {"stopPrice": "99.999"}
        )

        assert context.params["type"] == "stopLimit"
        assert context.params["stopPrice"] == "100.00"
        assert context.params["price"] == "100.00"
        assert "stop_price" not in context.params

    def test_stop_price_promotes_market(self, builder):
        context = builder.create_order(
            BTCEUR, "market", "sell", Decimal("1"), None, ACCOUNT, {"stop_price": Decimal("90")}
        )

        assert context.params["type"] == "stop"
        assert context.params["stopPrice"] == "90.00"
        assert "price" not in context.params

    def test_stop_type_requires_stop_price(self, builder):
        with pytest.raises(ArgumentsRequired):
            builder.create_order(BTCEUR, "stop", "sell", Decimal("1"), None, ACCOUNT)

    def test_non_numeric_stop_price(self, builder):
        with pytest.raises(InvalidOrder):
            builder.create_order(
                BTCEUR, "stop", "sell", Decimal("1"), None, ACCOUNT, {"stopPrice": "soon"}
            )

    def test_gtd_requires_expire_time(self, builder):
        with pytest.raises(InvalidOrder):
            builder.create_order(
                BTCEUR, "limit", "buy", Decimal("1"), Decimal("1"), ACCOUNT, {"timeInForce": "gtd"}
            )

    def test_gtd_with_expire_time(self, builder):
        context = builder.create_order(
            BTCEUR,
            "limit",
            "buy",
            Decimal("1"),
            Decimal("1"),
            ACCOUNT,
            {"timeInForce": "gtd", "expireTime": 1612100000000},
        )

        assert context.params["timeInForce"] == "GTD"
        assert context.params["expireTime"] == 1612100000000

    def test_post_only_not_supported(self, builder):
        with pytest.raises(NotSupported):
            builder.create_order(
                BTCEUR, "limit", "buy", Decimal("1"), Decimal("1"), ACCOUNT, {"postOnly": True}
            )

    def test_post_only_market_is_invalid_before_unsupported(self, builder):
        with pytest.raises(InvalidOrder):
            builder.create_order(
                BTCEUR, "market", "buy", Decimal("1"), None, ACCOUNT, {"postOnly": True}
            )

    def test_amount_below_size_increment(self, builder):
        with pytest.raises(InvalidOrder) as exc_info:
            builder.create_order(BTCEUR, "limit", "buy", Decimal("0.000001"), Decimal("100"), ACCOUNT)

        assert exc_info.value.operation == "create_order"

    def test_amount_below_market_minimum(self, builder):
        market = BTCEUR.model_copy(update={"min_amount": Decimal("0.001")})

        with pytest.raises(InvalidOrder, match="minimum"):
            builder.create_order(market, "limit", "buy", Decimal("0.0005"), Decimal("100"), ACCOUNT)

    def test_amount_at_market_minimum(self, builder):
        market = BTCEUR.model_copy(update={"min_amount": Decimal("0.001")})

        context = builder.create_order(market, "limit", "buy", Decimal("0.001"), Decimal("100"), ACCOUNT)

        assert context.params["quantity"] == "0.00100"


class TestOrderQueries:
    def test_cancel_uses_client_order_id(self, builder):
        context = builder.cancel_order("cid-1", ACCOUNT, {"account": "other"})

        assert context.path == "2/trading/cancel_order"
        assert context.params == {"clientOrderId": "cid-1", "account": ACCOUNT}

    def test_cancel_requires_id(self, builder):
        with pytest.raises(ArgumentsRequired):
            builder.cancel_order(None, ACCOUNT)

    def test_fetch_order_id_from_params(self, builder):
        context = builder.fetch_order(None, ACCOUNT, {"client_oid": "cid-9"})

        assert context.params == {"clientOrderId": "cid-9", "account": ACCOUNT}

    def test_fetch_order_requires_id(self, builder):
        with pytest.raises(ArgumentsRequired):
            builder.fetch_order(None, ACCOUNT, {})

    def test_closed_orders_request_terminal_statuses(self, builder):
        context = builder.fetch_closed_orders(BTCEUR, ACCOUNT)

        assert context.operation == "fetch_closed_orders"
        assert context.path == "1/trading/orders/recent"
        assert context.params == {
            "account": ACCOUNT,
            "symbols": "BTCEUR",
            "maxResults": 50,
            "statuses": CLOSED_ORDER_STATUSES,
        }

    def test_my_trades_defaults_can_be_overridden(self, builder):
        context = builder.fetch_my_trades(None, ACCOUNT, {"maxResults": 5})

        assert context.params == {
            "account": ACCOUNT,
            "by": "ts",
            "startIndex": 0,
            "maxResults": 5,
        }

    def test_recent_trades_without_since(self, builder):
        context = builder.trades(BTCEUR)

        assert context.path == "trades/recent/{symbol}"
        assert context.params["maxResults"] == 50

    def test_ranged_trades_with_since(self, builder):
        context = builder.trades(BTCEUR, since=1000, limit=10)

        assert context.path == "trades/{symbol}"
        assert context.params == {
            "symbol": "BTCEUR",
            "formatItem": "object",
            "maxResults": 10,
            "by": "ts",
            "from": 1000,
            "startIndex": 0,
        }


class TestWithdraw:
    def test_crypto_payout(self, builder):
        params = {"requestTime": 1612088909341, "commission": "0.0005"}

        address = "1BoatSLRHtKNngkdXEeobR76b53LETtpyT"
        payout = builder.check_withdraw("BTC", Decimal("0.5"), address, None, params)

        context = builder.withdraw(
            Currency(id="BTC", code="BTC"), Decimal("0.5"), address, ACCOUNT, payout
        )

        message = (
            "requestTime=1612088909341&amount=0.5&currency=BTC"
            f"&account={ACCOUNT}&address=1BoatSLRHtKNngkdXEeobR76b53LETtpyT&commission=0.0005"
        )
        assert context.path == "1/payment/payout/crypto"
        assert context.params["address"] == "1BoatSLRHtKNngkdXEeobR76b53LETtpyT"
        assert context.params["account"] == ACCOUNT
        assert context.params["transactionSignature"] == hmac_hex(message)

    def test_bank_payout(self, builder):
        params = {
            "requestTime": 1612088909341,
            "paymentType": "SEPA",
            "beneficiaryAccount": "LT121000011101001000",
            "beneficiaryName": "Jane Doe",
        }

        payout = builder.check_withdraw("EUR", Decimal("100"), None, None, params)

        context = builder.withdraw(
            Currency(id="EUR", code="EUR"), Decimal("100"), None, ACCOUNT, payout
        )

        message = (
            f"requestTime=1612088909341&accountFrom={ACCOUNT}&amount=100&currency=EUR"
            "&beneficiaryName=Jane Doe&beneficiaryAccount=LT121000011101001000"
        )
        assert context.path == "1/payment/payout/bank"
        assert "address" not in context.params
        assert context.params["transactionSignature"] == hmac_hex(message)

    def test_tag_not_supported(self, builder):
        with pytest.raises(NotSupported):
            builder.check_withdraw("XRP", Decimal("1"), "rAddress", "12345", {"requestTime": 1})

    @pytest.mark.parametrize("amount", [None, Decimal("0"), Decimal("-1")])
    def test_amount_must_be_positive(self, builder, amount):
        with pytest.raises(ArgumentsRequired):
            builder.check_withdraw("BTC", amount, "addr", None, {"requestTime": 1, "commission": 1})

    def test_request_time_required(self, builder):
        with pytest.raises(ArgumentsRequired):
            builder.check_withdraw("BTC", Decimal("1"), "addr", None, {"commission": 1})

    def test_crypto_requires_commission(self, builder):
        with pytest.raises(ArgumentsRequired):
            builder.check_withdraw("BTC", Decimal("1"), "addr", None, {"requestTime": 1})

    def test_crypto_requires_address(self, builder):
        with pytest.raises(ArgumentsRequired):
            builder.check_withdraw("BTC", Decimal("1"), None, None, {"requestTime": 1, "commission": 1})

    def test_address_with_whitespace(self, builder):
        with pytest.raises(BadRequest):
            builder.check_withdraw(
                "BTC", Decimal("1"), "1Boat SLR", None, {"requestTime": 1, "commission": 1}
            )

    def test_international_transfer_requires_swift(self, builder):
        params = {
            "requestTime": 1,
            "paymentType": "INTERNATIONAL",
            "beneficiaryAccount": "DE89370400440532013000",
        }
        with pytest.raises(ArgumentsRequired):
            builder.check_withdraw("EUR", Decimal("1"), None, None, params)

    def test_other_account_type_requires_name(self, builder):
        params = {
            "requestTime": 1,
            "paymentType": "SEPA",
            "beneficiaryAccount": "x",
            "beneficiaryAccountType": "other",
        }
        with pytest.raises(ArgumentsRequired):
            builder.check_withdraw("EUR", Decimal("1"), None, None, params)

    def test_intermediary_fields_come_in_pairs(self, builder):
        params = {
            "requestTime": 1,
            "paymentType": "SEPA",
            "beneficiaryAccount": "x",
            "intermediaryAccount": "y",
        }
        with pytest.raises(ArgumentsRequired):
            builder.check_withdraw("EUR", Decimal("1"), None, None, params)

    def test_fee_quote_requires_amount(self, builder):
        with pytest.raises(ArgumentsRequired):
            builder.withdraw_fee(Currency(id="BTC", code="BTC"), ACCOUNT, {})

    def test_fee_quote_endpoint_by_currency(self, builder):
        fiat = builder.withdraw_fee(Currency(id="EUR", code="EUR"), ACCOUNT, {"amount": 10})
        crypto = builder.withdraw_fee(Currency(id="BTC", code="BTC"), ACCOUNT, {"amount": 1})

        assert fiat.path == "1/payment/payout/fee/fiat"
        assert crypto.path == "1/payment/payout/fee/crypto"
        assert crypto.params == {"currency": "BTC", "amount": "1", "account": ACCOUNT}
