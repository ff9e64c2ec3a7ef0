"""
BingX Public Exchange

Unified market catalog across the spot and swap segments, plus server
time and candles.

Usage:
    async with BingxPublicExchange.from_config() as exchange:
        markets = await exchange.fetch_markets()
"""

import asyncio
from typing import Any, Dict, List, Mapping, Optional

from bingx_connector.config.structs import ExchangeConfig
from bingx_connector.exchanges.structs import Market, SegmentType, AccessLevel
from bingx_connector.infrastructure.exceptions.exchange import ExchangeError, NotSupported
from bingx_connector.infrastructure.logging import HFTLoggerInterface, get_exchange_logger
from .endpoints import BINGX_API_URL, BINGX_HOSTNAME, descriptor_for
from .rest.bingx_rest_client import BingxRestClient
from .services.market_mapper import to_markets
from .structs import (
    BingxSymbolsEnvelope, BingxServerTimeEnvelope, BingxKlinesEnvelope, decode_envelope
)

BINGX_ID = 'bingx'
BINGX_NAME = 'BingX'
BINGX_COUNTRIES = ['US']
BINGX_RATE_LIMIT_MS = 100
BINGX_VERSION = 'v1'

BINGX_URLS = {
    'api': {
        segment.value: BINGX_API_URL.format(hostname=BINGX_HOSTNAME, segment=segment.value)
        for segment in SegmentType
    },
    'www': 'https://bingx.com/',
    'doc': 'https://bingx-api.github.io/docs/',
}

BINGX_REQUIRED_CREDENTIALS = {
    'apiKey': True,
    'secret': True,
}

# None: capability exists at the venue but is not implemented here
BINGX_HAS: Mapping[str, Optional[bool]] = {
    'spot': True,
    'margin': True,
    'swap': None,
    'future': False,
    'fetchMarkets': True,
    'fetchTime': True,
    'fetchOHLCV': True,
}

BINGX_TIMEFRAMES: Mapping[str, str] = {
    '1m': '1',
    '3m': '3',
    '5m': '5',
    '15m': '15',
    '30m': '30',
    '1h': '60',
    '2h': '120',
    '4h': '240',
    '6h': '360',
    '12h': '720',
    '1d': '1D',
    '1w': '1W',
    '1M': '1M',
}

SPOT_PUBLIC = descriptor_for(SegmentType.SPOT, AccessLevel.PUBLIC)
SWAP_PUBLIC = descriptor_for(SegmentType.SWAP, AccessLevel.PUBLIC)


class BingxPublicExchange:
    """Public market data for BingX."""

    id = BINGX_ID
    name = BINGX_NAME
    countries = BINGX_COUNTRIES
    rate_limit_ms = BINGX_RATE_LIMIT_MS
    version = BINGX_VERSION
    urls = BINGX_URLS
    required_credentials = BINGX_REQUIRED_CREDENTIALS
    has = BINGX_HAS
    timeframes = BINGX_TIMEFRAMES

    def __init__(self, config: Optional[ExchangeConfig] = None,
                 rest_client: Optional[BingxRestClient] = None,
                 logger: Optional[HFTLoggerInterface] = None):
        self.config = config or ExchangeConfig()
        self.logger = logger or get_exchange_logger(self.config.name, 'public')
        self.rest_client = rest_client or BingxRestClient(self.config)

    @classmethod
    def from_config(cls, exchange_name: str = BINGX_ID) -> 'BingxPublicExchange':
        """Build from the ``exchanges.bingx`` section of config.yaml."""
        from bingx_connector.config.config_manager import get_exchange_config
        return cls(get_exchange_config(exchange_name))

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        try:
            await self.rest_client.close()
        finally:
            await self.logger.flush()

    async def fetch_spot_markets(self, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """Raw spot symbols, in venue order."""
        payload = await self.rest_client.request(SPOT_PUBLIC, 'commonSymbols', params)
        envelope = decode_envelope(payload, BingxSymbolsEnvelope, 'spot symbols')
        return envelope.data.symbols

    async def fetch_swap_markets(self, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """Raw swap contracts, in venue order."""
        payload = await self.rest_client.request(SWAP_PUBLIC, 'quoteContracts', params)
        envelope = decode_envelope(payload, BingxSymbolsEnvelope, 'swap contracts')
        return envelope.data.symbols

    async def fetch_markets(self, params: Optional[Mapping[str, Any]] = None) -> List[Market]:
        """
        Spot and swap markets fetched concurrently.

        Spot markets come first, then swap markets, each in venue order.
        The first failing segment cancels the other and its exception
        propagates; no partial catalog is returned.
        """
        tasks = [
            asyncio.create_task(self.fetch_spot_markets(params)),
            asyncio.create_task(self.fetch_swap_markets(params)),
        ]
        try:
            await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        finally:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        for segment, task in zip((SegmentType.SPOT, SegmentType.SWAP), tasks):
            if not task.cancelled() and task.exception() is not None:
                error = task.exception()
                self.logger.error("Market fetch failed",
                                  segment=segment.value,
                                  error_type=type(error).__name__,
                                  error=str(error))
                raise error

        spot_items, swap_items = tasks[0].result(), tasks[1].result()
        markets = (to_markets(spot_items, SegmentType.SPOT, self.logger) +
                   to_markets(swap_items, SegmentType.SWAP, self.logger))

        self.logger.info("Markets fetched",
                         spot=len(spot_items),
                         swap=len(swap_items),
                         total=len(markets))
        return markets

    async def fetch_server_time(self, params: Optional[Mapping[str, Any]] = None) -> int:
        """Venue time in milliseconds."""
        payload = await self.rest_client.request(SWAP_PUBLIC, 'serverTime', params)
        envelope = decode_envelope(payload, BingxServerTimeEnvelope, 'server time')
        return envelope.data.serverTime

    async def fetch_ohlcv(self, symbol: str, timeframe: str = '1m',
                          since: Optional[int] = None, limit: Optional[int] = None,
                          params: Optional[Mapping[str, Any]] = None) -> List[List[float]]:
        """
        Swap candles as ``[timestamp, open, high, low, close, volume]`` rows.

        ``symbol`` may be unified (``BTC/USDT:USDT``) or venue (``BTC-USDT``).

        Raises:
            NotSupported: unknown timeframe
        """
        interval = self.timeframes.get(timeframe)
        if interval is None:
            raise NotSupported(None, f"BingX does not support timeframe {timeframe!r}")

        request: Dict[str, Any] = {
            'symbol': self.market_id(symbol),
            'interval': interval,
        }
        if since is not None:
            request['startTime'] = int(since)
        if limit is not None:
            request['limit'] = int(limit)
        request.update(params or {})

        payload = await self.rest_client.request(SWAP_PUBLIC, 'quoteKlines', request)
        envelope = decode_envelope(payload, BingxKlinesEnvelope, 'klines')
        return [self._parse_ohlcv(row) for row in envelope.data]

    @staticmethod
    def market_id(symbol: str) -> str:
        """Venue symbol for a unified or venue symbol."""
        return symbol.split(':', 1)[0].replace('/', '-')

    @staticmethod
    def _parse_ohlcv(row: Dict[str, Any]) -> List[float]:
        try:
            return [
                int(row['time']),
                float(row['open']),
                float(row['high']),
                float(row['low']),
                float(row['close']),
                float(row['volume']),
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise ExchangeError(None, f"BingX klines: malformed candle {row!r}") from e
