from typing import Any, Dict, Optional

from msgspec import Struct

from bingx_connector.infrastructure.networking.http.structs import HTTPMethod
from .enums import SegmentType, AccessLevel
from .types import AssetName, OperationName


class SegmentDescriptor(Struct, frozen=True):
    """Identifies which segment, version and access level a call targets."""
    segment: SegmentType
    version: str
    access: AccessLevel

    @property
    def is_private(self) -> bool:
        return self.access is AccessLevel.PRIVATE

    def __str__(self) -> str:
        return f"{self.segment.value}/{self.version}/{self.access.value}"


class EndpointSpec(Struct, frozen=True):
    """Resolved endpoint: HTTP method, relative path and rate-limit weight."""
    descriptor: SegmentDescriptor
    operation: OperationName
    method: HTTPMethod
    path: str
    weight: int


class Market(Struct, frozen=True):
    """
    Unified market.

    ``info`` carries the venue's raw item untouched.
    """
    symbol: str
    base: AssetName
    quote: AssetName
    segment: SegmentType
    info: Dict[str, Any]
    settle: Optional[AssetName] = None
    id: Optional[str] = None

    @property
    def is_spot(self) -> bool:
        return self.segment is SegmentType.SPOT

    @property
    def is_swap(self) -> bool:
        return self.segment is SegmentType.SWAP
