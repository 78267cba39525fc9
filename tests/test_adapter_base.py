"""Tests for the shared adapter behaviour: caches, resolution and registry."""

from decimal import Decimal

import pytest

from conftest import FakeTransport
from tradebridge.adapters import ADAPTERS, create_adapter
from tradebridge.adapters.globitex import GlobitexAdapter
from tradebridge.errors import ArgumentsRequired, BadSymbol, NotSupported
from tradebridge.interfaces import Capability, ExchangeAdapter
from tradebridge.models import Account, Market


class CountingAdapter(ExchangeAdapter):
    """Minimal adapter counting how often metadata is fetched."""

    def __init__(self, accounts=None):
        super().__init__(transport=FakeTransport())
        self.market_fetches = 0
        self.account_fetches = 0
        self.account_list = accounts or []

    @property
    def exchange_name(self) -> str:
        return "counting"

    def sign(self, context):
        raise AssertionError("no requests expected")

    def handle_response(self, context, response):
        raise AssertionError("no responses expected")

    async def fetch_markets(self, params=None):
        self.market_fetches += 1
        return [
            Market(
                id="BTCEUR",
                symbol="BTC/EUR",
                base="BTC",
                quote="EUR",
                amount_increment=Decimal("0.00001"),
                price_increment=Decimal("0.01"),
            )
        ]

    async def fetch_accounts(self, params=None):
        self.account_fetches += 1
        return list(self.account_list)

    async def create_order(self, symbol, type, side, amount=None, price=None, params=None):
        raise AssertionError("not used")

    async def cancel_order(self, id, symbol=None, params=None):
        raise AssertionError("not used")


class TestMarketCache:
    def setup_method(self):
        self.adapter = CountingAdapter()

    @pytest.mark.asyncio
    async def test_load_markets_fetches_once(self):
        await self.adapter.load_markets()
        markets = await self.adapter.load_markets()

        assert list(markets) == ["BTC/EUR"]
        assert self.adapter.market_fetches == 1

    @pytest.mark.asyncio
    async def test_reload_fetches_again(self):
        await self.adapter.load_markets()
        await self.adapter.load_markets(reload=True)

        assert self.adapter.market_fetches == 2

    @pytest.mark.asyncio
    async def test_market_by_symbol_and_id(self):
        await self.adapter.load_markets()

        assert self.adapter.market("BTC/EUR").id == "BTCEUR"
        assert self.adapter.market("BTCEUR").symbol == "BTC/EUR"

    @pytest.mark.asyncio
    async def test_unknown_symbol_is_bad_symbol(self):
        await self.adapter.load_markets()

        with pytest.raises(BadSymbol) as exc_info:
            self.adapter.market("ETH/EUR", "fetch_ticker")

        assert exc_info.value.operation == "fetch_ticker"

    def test_market_before_load_is_bad_symbol(self):
        with pytest.raises(BadSymbol):
            self.adapter.market("BTC/EUR")

    @pytest.mark.asyncio
    async def test_safe_market_falls_back(self):
        await self.adapter.load_markets()
        fallback = Market(id="X", symbol="X/Y", base="X", quote="Y")

        assert self.adapter.safe_market("BTCEUR").symbol == "BTC/EUR"
        assert self.adapter.safe_market("NOPE", fallback) is fallback
        assert self.adapter.safe_market(None) is None
        assert self.adapter.safe_symbol("NOPE") == "NOPE"

    def test_unknown_currency_passes_through(self):
        currency = self.adapter.currency("XYZ")
        assert (currency.id, currency.code) == ("XYZ", "XYZ")


class TestAccountResolution:
    @pytest.mark.asyncio
    async def test_explicit_account_wins(self):
        adapter = CountingAdapter([Account(id="A1")])

        assert await adapter.resolve_account_id({"account": "B2"}) == "B2"
        assert adapter.account_fetches == 0

    @pytest.mark.asyncio
    async def test_first_loaded_account(self):
        adapter = CountingAdapter([Account(id="A1"), Account(id="A2", main=True)])

        assert await adapter.resolve_account_id() == "A1"
        assert await adapter.resolve_account_id({}) == "A1"
        assert adapter.account_fetches == 1

    @pytest.mark.asyncio
    async def test_no_accounts_requires_argument(self):
        adapter = CountingAdapter([])

        with pytest.raises(ArgumentsRequired) as exc_info:
            await adapter.resolve_account_id(None, "fetch_balance")

        assert exc_info.value.operation == "fetch_balance"

    @pytest.mark.asyncio
    async def test_reload_appends_new_accounts_only(self):
        adapter = CountingAdapter([Account(id="A1")])
        await adapter.load_accounts()

        adapter.account_list = [Account(id="A1"), Account(id="A3")]
        accounts = await adapter.load_accounts(reload=True)

        assert [a.id for a in accounts] == ["A1", "A3"]


class TestDefaults:
    def setup_method(self):
        self.adapter = CountingAdapter()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "operation,args",
        [
            ("fetch_ticker", ("BTC/EUR",)),
            ("fetch_ohlcv", ("BTC/EUR",)),
            ("fetch_balance", ()),
            ("fetch_my_trades", ()),
            ("withdraw", ("BTC", Decimal("1"), "addr")),
        ],
    )
    async def test_unimplemented_operations_not_supported(self, operation, args):
        with pytest.raises(NotSupported) as exc_info:
            await getattr(self.adapter, operation)(*args)

        assert exc_info.value.exchange == "counting"
        assert exc_info.value.operation == operation

    def test_has_reports_native_and_emulated(self):
        adapter = GlobitexAdapter(transport=FakeTransport())

        assert adapter.has(Capability.CREATE_ORDER)
        assert adapter.has(Capability.EDIT_ORDER)
        assert not adapter.has(Capability.FETCH_OHLCV)
        assert not self.adapter.has(Capability.CREATE_ORDER)

    @pytest.mark.asyncio
    async def test_close_closes_transport(self):
        async with CountingAdapter() as adapter:
            pass
        assert adapter.transport.closed


class TestRegistry:
    def test_create_known_adapter(self):
        adapter = create_adapter("Globitex", transport=FakeTransport())

        assert isinstance(adapter, GlobitexAdapter)
        assert adapter.exchange_name == "globitex"
        assert "globitex" in ADAPTERS

    def test_instances_do_not_share_caches(self):
        first = create_adapter("globitex", transport=FakeTransport())
        second = create_adapter("globitex", transport=FakeTransport())

        assert first.markets is not second.markets

    def test_unknown_exchange(self):
        with pytest.raises(NotSupported):
            create_adapter("nowhere")
