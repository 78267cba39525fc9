"""Tests for parameter bag normalization."""

import pytest

from tradebridge.config.models import ExchangeOptions
from tradebridge.core.params import extend, extract_market_type, extract_withdraw_tag, omit
from tradebridge.models.market import Market

SWAP_MARKET = Market(
    id="BTCUSDT-PERP",
    symbol="BTC/USDT:USDT",
    base="BTC",
    quote="USDT",
    type="swap",
    contract=True,
)


class TestExtendOmit:
    def test_extend_later_keys_win(self):
        assert extend({"a": 1, "b": 1}, None, {"b": 2}) == {"a": 1, "b": 2}

    def test_omit_does_not_mutate(self):
        params = {"type": "swap", "x": 1}
        assert omit(params, "type") == {"x": 1}
        assert params == {"type": "swap", "x": 1}


class TestExtractMarketType:
    def setup_method(self):
        self.options = ExchangeOptions(
            default_type="margin",
            method_options={
                "fetch_balance": "future",
                "fetch_positions": {"defaultType": "swap"},
            },
        )

    def test_params_win_over_everything(self):
        market_type, rest = extract_market_type(
            "fetch_balance", SWAP_MARKET, {"type": "spot", "x": 1}, self.options
        )
        assert market_type == "spot"
        assert rest == {"x": 1}

    def test_default_type_key_is_also_stripped(self):
        market_type, rest = extract_market_type("fetch_balance", None, {"defaultType": "swap"})
        assert market_type == "swap"
        assert rest == {}

    def test_market_beats_options(self):
        market_type, _ = extract_market_type("fetch_balance", SWAP_MARKET, {}, self.options)
        assert market_type == "swap"

    def test_method_option_string(self):
        market_type, _ = extract_market_type("fetch_balance", None, {}, self.options)
        assert market_type == "future"

    def test_method_option_mapping(self):
        market_type, _ = extract_market_type("fetch_positions", None, {}, self.options)
        assert market_type == "swap"

    def test_exchange_default(self):
        market_type, _ = extract_market_type("fetch_ticker", None, {}, self.options)
        assert market_type == "margin"

    def test_fallback_spot(self):
        market_type, rest = extract_market_type("fetch_ticker")
        assert market_type == "spot"
        assert rest == {}

    def test_input_params_unchanged(self):
        params = {"type": "swap"}
        extract_market_type("fetch_balance", None, params)
        assert params == {"type": "swap"}


class TestExtractWithdrawTag:
    def test_explicit_tag_kept(self):
        assert extract_withdraw_tag("memo-1", {"network": "XLM"}) == ("memo-1", {"network": "XLM"})

    def test_tag_from_params_is_stripped(self):
        assert extract_withdraw_tag(None, {"tag": "123", "x": 1}) == ("123", {"x": 1})

    def test_mapping_in_tag_position_is_params(self):
        tag, params = extract_withdraw_tag({"tag": "123", "network": "ERC20"}, {})
        assert tag == "123"
        assert params == {"network": "ERC20"}

    def test_explicit_params_win_over_misplaced_mapping(self):
        _, params = extract_withdraw_tag({"network": "ERC20"}, {"network": "TRC20"})
        assert params == {"network": "TRC20"}

    @pytest.mark.parametrize("tag", [None, ""])
    def test_no_tag(self, tag):
        assert extract_withdraw_tag(tag, {"tag": ""}) == (None, {})
