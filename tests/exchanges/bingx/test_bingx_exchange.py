"""Tests for the BingX public exchange: market catalog, server time and candles."""

import asyncio
from unittest.mock import AsyncMock, Mock, patch
from urllib.parse import parse_qsl, urlsplit

import pytest

from bingx_connector.config.structs import ExchangeConfig
from bingx_connector.exchanges.integrations.bingx import BingxPublicExchange
from bingx_connector.exchanges.structs import SegmentType
from bingx_connector.infrastructure.exceptions import (
    BadSymbol, ExchangeError, ExchangeNotAvailable, NotSupported
)
from bingx_connector.infrastructure.networking.http.structs import RawResponse

from tests.helpers import json_response, symbols_response

SPOT_SYMBOLS = [
    {"symbol": "BTC-USDT", "minQty": 0.0001, "status": 1},
    {"symbol": "ETH-USDT", "minQty": 0.001, "status": 1},
    {"symbol": "SOL-USDC", "minQty": 0.01, "status": 1},
]

SWAP_CONTRACTS = [
    {"symbol": "BTC-USDT", "asset": "BTC", "currency": "USDT", "pricePrecision": 1},
    {"symbol": "ETH-USDT", "asset": "ETH", "currency": "USDT", "pricePrecision": 2},
]


@pytest.fixture
def exchange(public_config, rest_client):
    return BingxPublicExchange(public_config, rest_client=rest_client)


def serve_markets(transport, spot=SPOT_SYMBOLS, swap=SWAP_CONTRACTS):
    transport.route("common/symbols", symbols_response(spot))
    transport.route("quote/contracts", symbols_response(swap))


class TestFetchMarkets:

    @pytest.mark.asyncio
    async def test_spot_then_swap_in_venue_order(self, exchange, transport):
        serve_markets(transport)

        markets = await exchange.fetch_markets()

        assert len(markets) == len(SPOT_SYMBOLS) + len(SWAP_CONTRACTS)
        assert [m.symbol for m in markets] == [
            "BTC/USDT", "ETH/USDT", "SOL/USDC", "BTC/USDT:USDT", "ETH/USDT:USDT"
        ]
        assert [m.segment for m in markets] == [SegmentType.SPOT] * 3 + [SegmentType.SWAP] * 2

    @pytest.mark.asyncio
    async def test_raw_items_carried_as_info(self, exchange, transport):
        serve_markets(transport)

        markets = await exchange.fetch_markets()

        assert [m.info for m in markets] == SPOT_SYMBOLS + SWAP_CONTRACTS

    @pytest.mark.asyncio
    async def test_order_holds_when_swap_answers_first(self, exchange, transport):
        async def slow_spot(request):
            await asyncio.sleep(0.01)
            return symbols_response(SPOT_SYMBOLS)

        transport.routes["common/symbols"] = slow_spot
        transport.route("quote/contracts", symbols_response(SWAP_CONTRACTS))

        markets = await exchange.fetch_markets()

        assert markets[0].symbol == "BTC/USDT"
        assert markets[-1].symbol == "ETH/USDT:USDT"

    @pytest.mark.asyncio
    async def test_empty_segment_is_represented(self, exchange, transport):
        serve_markets(transport, swap=[])

        markets = await exchange.fetch_markets()

        assert [m.symbol for m in markets] == ["BTC/USDT", "ETH/USDT", "SOL/USDC"]

    @pytest.mark.asyncio
    async def test_both_segments_requested(self, exchange, transport):
        serve_markets(transport)

        await exchange.fetch_markets()

        urls = sorted(request.url for request in transport.requests)
        assert urls == [
            "https://open-api.bingx.com/openApi/spot/v1/common/symbols",
            "https://open-api.bingx.com/openApi/swap/v2/quote/contracts",
        ]

    @pytest.mark.asyncio
    async def test_spot_failure_cancels_swap(self, exchange, transport):
        swap_cancelled = asyncio.Event()

        async def hanging_swap(request):
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                swap_cancelled.set()
                raise

        transport.route("common/symbols", RawResponse(status=503, text="maintenance"))
        transport.routes["quote/contracts"] = hanging_swap

        with pytest.raises(ExchangeNotAvailable):
            await exchange.fetch_markets()

        assert swap_cancelled.is_set()

    @pytest.mark.asyncio
    async def test_swap_failure_cancels_spot(self, exchange, transport):
        spot_cancelled = asyncio.Event()

        async def hanging_spot(request):
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                spot_cancelled.set()
                raise

        transport.routes["common/symbols"] = hanging_spot
        transport.route("quote/contracts", json_response({"code": 109414, "msg": "symbol not exist"}))

        with pytest.raises(BadSymbol):
            await exchange.fetch_markets()

        assert spot_cancelled.is_set()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"code": 0, "msg": ""},
        {"code": 0, "data": {}},
        {"code": 0, "data": {"symbols": "BTC-USDT"}},
        {"code": 0, "data": []},
    ])
    async def test_malformed_envelope(self, exchange, transport, payload):
        transport.route("common/symbols", json_response(payload))
        transport.route("quote/contracts", symbols_response(SWAP_CONTRACTS))

        with pytest.raises(ExchangeError, match="unexpected response shape"):
            await exchange.fetch_markets()

    @pytest.mark.asyncio
    async def test_odd_venue_symbol_kept_raw(self, public_config, rest_client, transport):
        logger = Mock()
        exchange = BingxPublicExchange(public_config, rest_client=rest_client, logger=logger)
        spot = [{"symbol": "BTCUSDT"}] + SPOT_SYMBOLS
        serve_markets(transport, spot=spot)

        markets = await exchange.fetch_markets()

        assert [m.symbol for m in markets] == [
            "BTCUSDT", "BTC/USDT", "ETH/USDT", "SOL/USDC", "BTC/USDT:USDT", "ETH/USDT:USDT"
        ]
        assert markets[0].info == spot[0]
        assert markets[0].base == ""
        logger.warning.assert_called_once()
        assert logger.warning.call_args.kwargs["venue_symbol"] == "BTCUSDT"


class TestSegmentFetches:

    @pytest.mark.asyncio
    async def test_spot_markets_are_raw(self, exchange, transport):
        serve_markets(transport)

        assert await exchange.fetch_spot_markets() == SPOT_SYMBOLS

    @pytest.mark.asyncio
    async def test_swap_markets_are_raw(self, exchange, transport):
        serve_markets(transport)

        assert await exchange.fetch_swap_markets() == SWAP_CONTRACTS


class TestServerTime:

    @pytest.mark.asyncio
    async def test_fetch_server_time(self, exchange, transport):
        transport.route("server/time", json_response({"code": 0, "msg": "", "data": {"serverTime": 1700000000123}}))

        assert await exchange.fetch_server_time() == 1700000000123

    @pytest.mark.asyncio
    async def test_malformed_server_time(self, exchange, transport):
        transport.route("server/time", json_response({"code": 0, "data": {}}))

        with pytest.raises(ExchangeError):
            await exchange.fetch_server_time()


class TestFetchOhlcv:

    CANDLES = [
        {"open": "100.5", "close": "101", "high": "102", "low": "99.5", "volume": "12.5", "time": 1700000000000},
        {"open": "101", "close": "100", "high": "101.5", "low": "99", "volume": "3", "time": 1700003600000},
    ]

    @pytest.mark.asyncio
    async def test_parses_candles(self, exchange, transport):
        transport.route("quote/klines", json_response({"code": 0, "data": self.CANDLES}))

        candles = await exchange.fetch_ohlcv("BTC/USDT:USDT", "1h", since=1700000000000, limit=2)

        assert candles == [
            [1700000000000, 100.5, 102.0, 99.5, 101.0, 12.5],
            [1700003600000, 101.0, 101.5, 99.0, 100.0, 3.0],
        ]
        query = dict(parse_qsl(urlsplit(transport.requests[0].url).query))
        assert query == {"symbol": "BTC-USDT", "interval": "60", "startTime": "1700000000000", "limit": "2"}

    @pytest.mark.asyncio
    async def test_venue_symbol_passes_through(self, exchange, transport):
        transport.route("quote/klines", json_response({"code": 0, "data": []}))

        assert await exchange.fetch_ohlcv("ETH-USDT") == []
        query = dict(parse_qsl(urlsplit(transport.requests[0].url).query))
        assert query == {"symbol": "ETH-USDT", "interval": "1"}

    @pytest.mark.asyncio
    async def test_unknown_timeframe(self, exchange, transport):
        with pytest.raises(NotSupported):
            await exchange.fetch_ohlcv("BTC/USDT:USDT", "7m")

        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_malformed_candle(self, exchange, transport):
        transport.route("quote/klines", json_response({"code": 0, "data": [{"open": "1"}]}))

        with pytest.raises(ExchangeError, match="malformed candle"):
            await exchange.fetch_ohlcv("BTC/USDT:USDT")


class TestDescription:

    def test_capabilities(self):
        assert BingxPublicExchange.id == "bingx"
        assert BingxPublicExchange.has["swap"] is None
        assert BingxPublicExchange.has["fetchMarkets"] is True
        assert BingxPublicExchange.timeframes["1d"] == "1D"
        assert BingxPublicExchange.urls["api"]["swap"] == "https://open-api.bingx.com/openApi/swap"

    @pytest.mark.parametrize("symbol, expected", [
        ("BTC/USDT", "BTC-USDT"),
        ("BTC/USDT:USDT", "BTC-USDT"),
        ("BTC-USDT", "BTC-USDT"),
    ])
    def test_market_id(self, symbol, expected):
        assert BingxPublicExchange.market_id(symbol) == expected


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_context_manager_closes_transport(self, exchange, transport):
        async with exchange:
            pass

        assert transport.closed

    @pytest.mark.asyncio
    async def test_close_flushes_logger(self, public_config, rest_client, transport):
        logger = Mock(flush=AsyncMock())
        exchange = BingxPublicExchange(public_config, rest_client=rest_client, logger=logger)

        async with exchange:
            pass

        logger.flush.assert_awaited_once()
        assert transport.closed

    @pytest.mark.asyncio
    async def test_from_config(self):
        config = ExchangeConfig(hostname="bingx.pro")
        with patch('bingx_connector.config.config_manager.get_exchange_config', return_value=config) as getter:
            exchange = BingxPublicExchange.from_config()

        getter.assert_called_once_with("bingx")
        assert exchange.config is config
        assert exchange.rest_client.signer.hostname == "bingx.pro"
        await exchange.close()
