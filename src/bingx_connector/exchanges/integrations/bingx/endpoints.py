"""
BingX Endpoint Registry

The venue API is declared once as a nested table

    segment -> version -> access -> method -> {path: weight}

and compiled into an immutable lookup keyed by
(segment, version, access, operation). Operation names are the camelCase
form of the path: ``common/symbols`` -> ``commonSymbols``.

Empty access or method branches are capabilities not wired yet; they
resolve nothing and are not an error.
"""

import re
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple, Union

from bingx_connector.exchanges.structs import (
    SegmentType, AccessLevel, SegmentDescriptor, EndpointSpec, OperationName
)
from bingx_connector.infrastructure.exceptions.system import ConfigurationError
from bingx_connector.infrastructure.networking.http.structs import HTTPMethod

BINGX_API_URL = 'https://open-api.{hostname}/openApi/{segment}'
BINGX_HOSTNAME = 'bingx.com'

BINGX_API: Mapping[str, Mapping] = {
    'spot': {
        'v1': {
            'public': {
                'get': {
                    'common/symbols': 1,
                    'market/trades': 1,
                    'market/depth': 1,
                    'market/getLatestKline': 1,
                },
            },
            'private': {
                'get': {},
                'post': {},
            },
        },
    },
    'swap': {
        'v2': {
            'public': {
                'get': {
                    'server/time': 1,
                    'quote/contracts': 1,
                    'quote/price': 1,
                    'quote/depth': 1,
                    'quote/trades': 1,
                    'quote/premiumIndex': 1,
                    'quote/fundingRate': 1,
                    'quote/klines': 1,
                    'quote/openInterest': 1,
                    'quote/ticker': 1,
                },
                'post': {},
            },
            'private': {
                'post': {},
            },
        },
    },
    'contract': {
        'v1': {
            'public': {
                'get': {},
            },
        },
    },
}

# Version each segment is served under
BINGX_SEGMENTS: Mapping[SegmentType, str] = MappingProxyType({
    SegmentType.SPOT: 'v1',
    SegmentType.SWAP: 'v2',
    SegmentType.CONTRACT: 'v1',
})

RegistryKey = Tuple[SegmentType, str, AccessLevel, str]

_WORD_SEPARATORS = re.compile(r'[^A-Za-z0-9]+')


def to_operation_name(path: str) -> OperationName:
    """
    camelCase operation name for a path.

    >>> to_operation_name('quote/premiumIndex')
    'quotePremiumIndex'
    """
    words = [w for w in _WORD_SEPARATORS.split(path) if w]
    if not words:
        raise ConfigurationError(f"Cannot derive operation name from path {path!r}", path)
    head = words[0][0].lower() + words[0][1:]
    return OperationName(head + ''.join(w[0].upper() + w[1:] for w in words[1:]))


def descriptor_for(segment: Union[SegmentType, str], access: Union[AccessLevel, str],
                   version: Optional[str] = None) -> SegmentDescriptor:
    """Descriptor with the segment's served version unless one is given."""
    segment = _as_segment(segment)
    return SegmentDescriptor(
        segment=segment,
        version=version or BINGX_SEGMENTS[segment],
        access=_as_access(access)
    )


def _as_segment(value: Union[SegmentType, str]) -> SegmentType:
    if isinstance(value, SegmentType):
        return value
    try:
        return SegmentType(str(value).lower())
    except ValueError:
        raise ConfigurationError(f"Unknown segment {value!r}", 'segment') from None


def _as_access(value: Union[AccessLevel, str]) -> AccessLevel:
    if isinstance(value, AccessLevel):
        return value
    try:
        return AccessLevel(str(value).lower())
    except ValueError:
        raise ConfigurationError(f"Unknown access level {value!r}", 'access') from None


def _as_method(value: str) -> HTTPMethod:
    try:
        return HTTPMethod[str(value).upper()]
    except KeyError:
        raise ConfigurationError(f"Unknown HTTP method {value!r}", 'method') from None


class EndpointRegistry:
    """
    Read-only endpoint lookup built once from a declarative API table.

    Raises ConfigurationError at build time for unknown segments, access
    levels or methods, non-positive weights, and operation names declared
    twice under one (segment, version, access).
    """

    def __init__(self, api: Mapping[str, Mapping] = BINGX_API):
        endpoints: Dict[RegistryKey, EndpointSpec] = {}
        by_path: Dict[Tuple[SegmentType, str, AccessLevel, str, HTTPMethod], EndpointSpec] = {}

        for segment_name, versions in api.items():
            segment = _as_segment(segment_name)
            for version, access_levels in versions.items():
                for access_name, methods in access_levels.items():
                    descriptor = SegmentDescriptor(segment, version, _as_access(access_name))
                    for method_name, paths in methods.items():
                        method = _as_method(method_name)
                        for path, weight in paths.items():
                            spec = self._build_spec(descriptor, method, path, weight)
                            key = (segment, version, descriptor.access, spec.operation)
                            if key in endpoints:
                                raise ConfigurationError(
                                    f"Duplicate operation {spec.operation!r} under {descriptor}",
                                    spec.operation
                                )
                            endpoints[key] = spec
                            by_path[(segment, version, descriptor.access, path, method)] = spec

        self._endpoints: Mapping[RegistryKey, EndpointSpec] = MappingProxyType(endpoints)
        self._by_path = MappingProxyType(by_path)

    @staticmethod
    def _build_spec(descriptor: SegmentDescriptor, method: HTTPMethod, path: str, weight) -> EndpointSpec:
        if isinstance(weight, bool) or not isinstance(weight, int) or weight <= 0:
            raise ConfigurationError(
                f"Weight of {descriptor}/{path} must be a positive integer, got {weight!r}",
                path
            )
        return EndpointSpec(
            descriptor=descriptor,
            operation=to_operation_name(path),
            method=method,
            path=path,
            weight=weight
        )

    def resolve(self, segment: Union[SegmentType, str], version: str,
                access: Union[AccessLevel, str], operation: str) -> EndpointSpec:
        """
        Endpoint for the tuple.

        Raises:
            ConfigurationError: the tuple is not declared
        """
        key = (_as_segment(segment), version, _as_access(access), operation)
        spec = self._endpoints.get(key)
        if spec is None:
            raise ConfigurationError(
                f"No endpoint for {key[0].value}/{version}/{key[2].value} operation {operation!r}",
                operation
            )
        return spec

    def resolve_descriptor(self, descriptor: SegmentDescriptor, operation: str) -> EndpointSpec:
        return self.resolve(descriptor.segment, descriptor.version, descriptor.access, operation)

    def resolve_path(self, descriptor: SegmentDescriptor, path: str,
                     method: Optional[HTTPMethod] = None) -> EndpointSpec:
        """Endpoint by relative path. Without ``method`` any declared method matches."""
        methods = [method] if method is not None else list(HTTPMethod)
        for candidate in methods:
            spec = self._by_path.get(
                (descriptor.segment, descriptor.version, descriptor.access, path, candidate))
            if spec is not None:
                return spec
        raise ConfigurationError(f"No endpoint for {descriptor} path {path!r}", path)

    def has(self, segment: Union[SegmentType, str], version: str,
            access: Union[AccessLevel, str], operation: str) -> bool:
        try:
            self.resolve(segment, version, access, operation)
        except ConfigurationError:
            return False
        return True

    def endpoints(self, descriptor: Optional[SegmentDescriptor] = None) -> Iterator[EndpointSpec]:
        """All endpoints in declaration order, optionally for one descriptor."""
        for spec in self._endpoints.values():
            if descriptor is None or spec.descriptor == descriptor:
                yield spec

    def __len__(self) -> int:
        return len(self._endpoints)

    def __contains__(self, key: RegistryKey) -> bool:
        segment, version, access, operation = key
        return self.has(segment, version, access, operation)
