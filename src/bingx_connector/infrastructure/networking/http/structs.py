from enum import Enum
from typing import Dict, Optional
import msgspec


class HTTPMethod(Enum):
    """HTTP methods."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class SignedRequest(msgspec.Struct, frozen=True):
    """Fully prepared request: absolute URL, headers and optional form body."""
    url: str
    method: HTTPMethod
    headers: Dict[str, str] = {}
    body: Optional[str] = None


class RawResponse(msgspec.Struct, frozen=True):
    """Undecoded HTTP response as returned by the transport."""
    status: int
    text: str
    headers: Dict[str, str] = {}
