"""
BingX response envelopes.

Markets come back as ``{"code": 0, "msg": "", "data": {"symbols": [...]}}``.
Items are kept as raw mappings and passed through untouched.
"""

from typing import Any, Dict, List, Optional, Union

import msgspec

from bingx_connector.infrastructure.exceptions.exchange import ExchangeError


class BingxSymbolsData(msgspec.Struct):
    symbols: List[Dict[str, Any]]


class BingxSymbolsEnvelope(msgspec.Struct):
    data: BingxSymbolsData
    code: Optional[Union[int, str]] = None
    msg: Optional[str] = None


class BingxServerTimeData(msgspec.Struct):
    serverTime: int


class BingxServerTimeEnvelope(msgspec.Struct):
    data: BingxServerTimeData
    code: Optional[Union[int, str]] = None


class BingxKlinesEnvelope(msgspec.Struct):
    data: List[Dict[str, Any]]
    code: Optional[Union[int, str]] = None


def decode_envelope(payload: Any, envelope_type: type, context: str):
    """
    Convert a decoded payload into ``envelope_type``.

    Raises:
        ExchangeError: missing or malformed fields
    """
    try:
        return msgspec.convert(payload, envelope_type)
    except msgspec.ValidationError as e:
        raise ExchangeError(None, f"BingX {context}: unexpected response shape: {e}") from e
