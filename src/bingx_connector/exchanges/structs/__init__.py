from .enums import SegmentType, AccessLevel
from .types import AssetName, OperationName
from .common import SegmentDescriptor, EndpointSpec, Market

__all__ = [
    'SegmentType',
    'AccessLevel',
    'AssetName',
    'OperationName',
    'SegmentDescriptor',
    'EndpointSpec',
    'Market',
]
