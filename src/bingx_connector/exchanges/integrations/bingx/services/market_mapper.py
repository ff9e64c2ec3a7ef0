"""
Venue item -> unified Market.

Spot ``BTC-USDT`` becomes ``BTC/USDT``; swap contracts become
``BTC/USDT:USDT`` (settled in the quote currency).
"""

from typing import Any, Dict, List, Optional, Tuple

from bingx_connector.exchanges.structs import Market, SegmentType, AssetName
from bingx_connector.infrastructure.exceptions.exchange import ExchangeError
from bingx_connector.infrastructure.logging import HFTLoggerInterface

SYMBOL_SEPARATOR = '-'


def split_symbol(venue_symbol: str) -> Tuple[AssetName, AssetName]:
    base, sep, quote = venue_symbol.partition(SYMBOL_SEPARATOR)
    if not sep or not base or not quote:
        raise ExchangeError(None, f"BingX symbol {venue_symbol!r} is not BASE-QUOTE")
    return AssetName(base.upper()), AssetName(quote.upper())


def to_spot_market(item: Dict[str, Any]) -> Market:
    venue_symbol = str(item.get('symbol') or '')
    base, quote = split_symbol(venue_symbol)
    return Market(
        symbol=f"{base}/{quote}",
        base=base,
        quote=quote,
        segment=SegmentType.SPOT,
        info=item,
        id=venue_symbol
    )


def to_swap_market(item: Dict[str, Any]) -> Market:
    venue_symbol = str(item.get('symbol') or '')
    if item.get('asset') and item.get('currency'):
        base, quote = AssetName(str(item['asset']).upper()), AssetName(str(item['currency']).upper())
    else:
        base, quote = split_symbol(venue_symbol)
    return Market(
        symbol=f"{base}/{quote}:{quote}",
        base=base,
        quote=quote,
        segment=SegmentType.SWAP,
        info=item,
        settle=quote,
        id=venue_symbol or None
    )


def to_raw_market(item: Dict[str, Any], segment: SegmentType) -> Market:
    """Listing whose symbol cannot be split; keeps the venue symbol, no assets."""
    venue_symbol = str(item.get('symbol') or '')
    return Market(
        symbol=venue_symbol,
        base=AssetName(''),
        quote=AssetName(''),
        segment=segment,
        info=item,
        id=venue_symbol or None
    )


_MAPPERS = {
    SegmentType.SPOT: to_spot_market,
    SegmentType.SWAP: to_swap_market,
}


def to_markets(items: List[Dict[str, Any]], segment: SegmentType,
               logger: Optional[HFTLoggerInterface] = None) -> List[Market]:
    """
    One Market per item, in the given order.

    An item with an unexpected symbol becomes a raw market (see
    ``to_raw_market``) and is reported through ``logger``; the rest of the
    listing is unaffected.
    """
    mapper = _MAPPERS.get(segment)
    if mapper is None:
        raise ExchangeError(None, f"BingX {segment.value} markets are not supported")

    markets = []
    for item in items:
        try:
            markets.append(mapper(item))
        except ExchangeError as e:
            if logger is not None:
                logger.warning("Unparsed BingX market kept raw",
                               segment=segment.value, venue_symbol=item.get('symbol'), error=str(e))
            markets.append(to_raw_market(item, segment))
    return markets
