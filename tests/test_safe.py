"""Tests for defensive field extraction and list helpers."""

from decimal import Decimal

from tradebridge.core.precision import amount_to_precision, price_to_precision
from tradebridge.core.safe import (
    filter_by_symbol_since_limit,
    index_by,
    iso8601,
    safe_decimal,
    safe_integer,
    safe_string,
    safe_value,
    sort_by_timestamp,
    to_decimal,
)
from tradebridge.models.derivatives import FundingRateHistory


class TestSafeAccessors:
    """Missing data never turns into zero."""

    def test_empty_string_is_missing(self):
        assert safe_value({"price": ""}, "price") is None
        assert safe_decimal({"price": ""}, "price") is None
        assert safe_string({"price": ""}, "price") is None

    def test_first_present_key_wins(self):
        data = {"cumQuantity": None, "execQuantity": "0.2"}
        assert safe_decimal(data, "cumQuantity", "execQuantity") == Decimal("0.2")

    def test_zero_is_present(self):
        assert safe_decimal({"reserved": "0.0"}, "reserved") == Decimal("0.0")

    def test_floats_convert_through_str(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_invalid_values_yield_none(self):
        assert to_decimal("abc") is None
        assert to_decimal(True) is None
        assert to_decimal("NaN") is None
        assert safe_decimal(None, "x") is None

    def test_safe_integer_truncates_decimal_strings(self):
        assert safe_integer({"timestamp": "1480067768415"}, "timestamp") == 1480067768415
        assert safe_integer({"timestamp": None}, "timestamp") is None


class TestIso8601:
    def test_millisecond_precision(self):
        assert iso8601(1480067768415) == "2016-11-25T09:56:08.415Z"

    def test_whole_second_is_zero_padded(self):
        assert iso8601(1480067768000) == "2016-11-25T09:56:08.000Z"

    def test_none(self):
        assert iso8601(None) is None


class TestSortAndFilter:
    def setup_method(self):
        self.rates = [
            FundingRateHistory(symbol="BTC/USDT:USDT", timestamp=3000, funding_rate=Decimal("0.03")),
            FundingRateHistory(symbol="BTC/USDT:USDT", timestamp=1000, funding_rate=Decimal("0.01")),
            FundingRateHistory(symbol="ETH/USDT:USDT", timestamp=2000, funding_rate=Decimal("0.02")),
            FundingRateHistory(symbol="BTC/USDT:USDT", timestamp=None, funding_rate=Decimal("0")),
        ]

    def test_sort_puts_missing_timestamps_last(self):
        ordered = sort_by_timestamp(self.rates)
        assert [r.timestamp for r in ordered] == [1000, 2000, 3000, None]

    def test_filter_by_symbol(self):
        result = filter_by_symbol_since_limit(sort_by_timestamp(self.rates), "ETH/USDT:USDT")
        assert [r.timestamp for r in result] == [2000]

    def test_since_excludes_earlier_and_untimed(self):
        result = filter_by_symbol_since_limit(sort_by_timestamp(self.rates), since=2000)
        assert [r.timestamp for r in result] == [2000, 3000]

    def test_limit_keeps_earliest(self):
        result = filter_by_symbol_since_limit(sort_by_timestamp(self.rates), limit=2)
        assert [r.timestamp for r in result] == [1000, 2000]

    def test_index_by_later_wins(self):
        indexed = index_by(self.rates, lambda r: r.symbol)
        assert indexed["BTC/USDT:USDT"].timestamp is None


class TestPrecision:
    def test_amount_truncates(self):
        assert amount_to_precision(Decimal("1.23456"), Decimal("0.001")) == "1.234"

    def test_amount_keeps_increment_scale(self):
        assert amount_to_precision(Decimal("0.0003"), Decimal("0.00001")) == "0.00030"

    def test_price_rounds_half_up(self):
        assert price_to_precision(Decimal("553.085"), Decimal("0.01")) == "553.09"

    def test_no_increment_passes_through(self):
        assert price_to_precision(Decimal("553.0851"), None) == "553.0851"
