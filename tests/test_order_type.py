"""Tests for post-only and order argument resolution."""

from decimal import Decimal

import pytest

from tradebridge.core.order_type import check_order_arguments, is_post_only, resolve_post_only
from tradebridge.errors import ArgumentsRequired, InvalidOrder


class TestResolvePostOnly:
    def test_po_time_in_force_becomes_post_only_limit(self):
        assert resolve_post_only("limit", "PO", False, {}) == ("limit", True, None, {})

    def test_post_only_type(self):
        order_type, post_only, tif, params = resolve_post_only("postOnly", None, False, {"x": 1})
        assert (order_type, post_only, tif, params) == ("limit", True, None, {"x": 1})

    def test_params_flag_is_stripped(self):
        _, post_only, tif, params = resolve_post_only(
            "limit", None, False, {"postOnly": True, "timeInForce": "GTC"}
        )
        assert post_only is True
        assert tif == "GTC"
        assert params == {}

    def test_exchange_flag(self):
        _, post_only, _, _ = resolve_post_only("limit", None, True, {})
        assert post_only is True

    def test_not_requested_passes_through(self):
        params = {"timeInForce": "IOC", "x": 1}
        assert resolve_post_only("limit", None, False, params) == ("limit", False, "IOC", params)

    @pytest.mark.parametrize("tif", ["IOC", "FOK", "ioc"])
    def test_immediate_time_in_force_rejected(self, tif):
        with pytest.raises(InvalidOrder):
            resolve_post_only("limit", tif, False, {"postOnly": True})

    def test_market_post_only_rejected(self):
        with pytest.raises(InvalidOrder):
            resolve_post_only("market", None, False, {"postOnly": True})

    def test_input_params_unchanged(self):
        params = {"postOnly": True}
        resolve_post_only("limit", None, False, params)
        assert params == {"postOnly": True}


class TestIsPostOnly:
    def test_market_order_with_flag_rejected(self):
        with pytest.raises(InvalidOrder):
            is_post_only(True, False, {"post_only": True})

    def test_plain_limit(self):
        assert is_post_only(False, False, {}) is False


class TestCheckOrderArguments:
    def test_limit_without_price(self):
        with pytest.raises(ArgumentsRequired):
            check_order_arguments("limit", Decimal("1"), None)

    @pytest.mark.parametrize("amount", [None, 0, "-1", "abc"])
    def test_amount_must_be_positive(self, amount):
        with pytest.raises(ArgumentsRequired):
            check_order_arguments("market", amount)

    def test_returns_decimal_amount(self):
        assert check_order_arguments("limit", "0.5", Decimal("100")) == Decimal("0.5")
