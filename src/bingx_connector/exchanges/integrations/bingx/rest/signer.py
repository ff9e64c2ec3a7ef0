"""
BingX Request Signer

Turns (path, segment descriptor, params) into a SignedRequest. Pure apart
from the credential check: no I/O, the input mapping is never mutated,
and the timestamp source is injectable.

Public:  {api}/{version}/{path}?{sorted params}
Private: same URL, ``X-BX-APIKEY`` header, HMAC-SHA256 over the sorted
         params plus ``timestamp``; the signed query goes in the URL for
         GET/DELETE and in the form body for POST/PUT.
"""

import hashlib
import hmac
import re
import time
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple
from urllib.parse import urlencode

from bingx_connector.config.structs import ExchangeCredentials
from bingx_connector.exchanges.structs import SegmentDescriptor
from bingx_connector.infrastructure.exceptions.exchange import BadRequest
from bingx_connector.infrastructure.networking.http.structs import HTTPMethod, SignedRequest
from ..endpoints import BINGX_API_URL, BINGX_HOSTNAME

API_KEY_HEADER = 'X-BX-APIKEY'

_PLACEHOLDER = re.compile(r'\{([^}]+)\}')

# Methods whose signed parameters travel in the request body
_BODY_METHODS = (HTTPMethod.POST, HTTPMethod.PUT)


def milliseconds() -> int:
    return int(time.time() * 1000)


def implode_params(path: str, params: Mapping[str, Any]) -> Tuple[str, Dict[str, Any]]:
    """
    Substitute ``{name}`` tokens in ``path`` from ``params``.

    Returns the imploded path and a new dict without the consumed keys.
    """
    remaining = dict(params)

    def replace(match):
        name = match.group(1)
        if name not in remaining:
            raise BadRequest(None, f"Missing path parameter {name!r} for {path!r}")
        return str(remaining.pop(name))

    return _PLACEHOLDER.sub(replace, path), remaining


def keysort(params: Mapping[str, Any]) -> List[Tuple[str, Any]]:
    """Parameters ordered by key, with values in their wire form."""
    return [(key, _wire_value(params[key])) for key in sorted(params)]


def _wire_value(value: Any) -> Any:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return value


class BingxRequestSigner:
    """Builds URLs, headers and bodies for every BingX call."""

    def __init__(self, credentials: Optional[ExchangeCredentials] = None,
                 hostname: str = BINGX_HOSTNAME,
                 nonce: Optional[Callable[[], int]] = None):
        self.credentials = credentials or ExchangeCredentials()
        self.hostname = hostname
        self.nonce = nonce or milliseconds

    def base_url(self, descriptor: SegmentDescriptor) -> str:
        api = BINGX_API_URL.format(hostname=self.hostname, segment=descriptor.segment.value)
        return f"{api}/{descriptor.version}/"

    def sign(self, path: str, descriptor: SegmentDescriptor,
             method: HTTPMethod = HTTPMethod.GET,
             params: Optional[Mapping[str, Any]] = None,
             headers: Optional[Mapping[str, str]] = None,
             body: Optional[str] = None) -> SignedRequest:
        """
        Build the request for ``path`` on the segment in ``descriptor``.

        Raises:
            AuthenticationError: private call without api key or secret
            BadRequest: a ``{placeholder}`` in ``path`` has no parameter
        """
        if descriptor.is_private:
            self.credentials.check_required_credentials()

        path, remaining = implode_params(path, params or {})
        url = self.base_url(descriptor) + path
        request_headers = dict(headers or {})

        if not descriptor.is_private:
            query = urlencode(keysort(remaining))
            if query:
                url += '?' + query
            return SignedRequest(url=url, method=method, headers=request_headers, body=body)

        signed_params = dict(remaining)
        signed_params['timestamp'] = self.nonce()
        query = urlencode(keysort(signed_params))
        signature = hmac.new(
            self.credentials.secret_key.encode('utf-8'),
            query.encode('utf-8'),
            hashlib.sha256
        ).hexdigest()
        signed_query = f"{query}&signature={signature}"

        request_headers[API_KEY_HEADER] = self.credentials.api_key
        if method in _BODY_METHODS:
            request_headers['Content-Type'] = 'application/x-www-form-urlencoded'
            return SignedRequest(url=url, method=method, headers=request_headers, body=signed_query)

        return SignedRequest(url=f"{url}?{signed_query}", method=method, headers=request_headers, body=body)
