"""
BingX REST Client

Request pipeline shared by every BingX call:

    registry resolve -> weight metric -> sign -> execute -> decode -> classify

Returns the decoded JSON payload or raises the classified exception.
"""

from typing import Any, Dict, Mapping, Optional

import msgspec

from bingx_connector.config.structs import ExchangeConfig
from bingx_connector.exchanges.structs import SegmentDescriptor, EndpointSpec
from bingx_connector.infrastructure.exceptions.exchange import ExchangeError
from bingx_connector.infrastructure.logging import HFTLoggerInterface, get_exchange_logger
from bingx_connector.infrastructure.networking.http.rest_manager import RestManager
from bingx_connector.infrastructure.networking.http.structs import HTTPMethod, RawResponse
from ..endpoints import EndpointRegistry
from .exception_handler import BingxExceptionHandler
from .signer import BingxRequestSigner


class BingxRestClient:
    """
    REST client for all BingX segments.

    Collaborators are injectable; by default they are built from ``config``.
    """

    def __init__(self, config: Optional[ExchangeConfig] = None,
                 registry: Optional[EndpointRegistry] = None,
                 signer: Optional[BingxRequestSigner] = None,
                 transport: Optional[RestManager] = None,
                 exception_handler: Optional[BingxExceptionHandler] = None,
                 logger: Optional[HFTLoggerInterface] = None):
        self.config = config or ExchangeConfig()
        self.registry = registry or EndpointRegistry()
        self.signer = signer or BingxRequestSigner(self.config.credentials, self.config.hostname)

        if transport is None:
            network = self.config.get_network_config()
            transport = RestManager(
                request_timeout=network.request_timeout,
                connect_timeout=network.connect_timeout,
                max_attempts=network.max_retries + 1,
                retry_delay=network.retry_delay
            )
        self.transport = transport
        self.exception_handler = exception_handler or BingxExceptionHandler()
        self.logger = logger or get_exchange_logger(self.config.name, 'rest')

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def request(self, descriptor: SegmentDescriptor, operation: str,
                      params: Optional[Mapping[str, Any]] = None,
                      headers: Optional[Mapping[str, str]] = None,
                      body: Optional[str] = None) -> Any:
        """
        Call an operation by name, e.g. ``request(spot_public, 'commonSymbols')``.

        Raises:
            ConfigurationError: operation not declared for the descriptor
            AuthenticationError: private call without credentials
            ExchangeError: transport failure, invalid JSON or a venue error
        """
        spec = self.registry.resolve_descriptor(descriptor, operation)
        return await self._execute(spec, params, headers, body)

    async def fetch(self, path: str, descriptor: SegmentDescriptor,
                    method: Optional[HTTPMethod] = None,
                    params: Optional[Mapping[str, Any]] = None,
                    headers: Optional[Mapping[str, str]] = None,
                    body: Optional[str] = None) -> Any:
        """Call an endpoint by its relative path."""
        spec = self.registry.resolve_path(descriptor, path, method)
        return await self._execute(spec, params, headers, body)

    async def _execute(self, spec: EndpointSpec, params: Optional[Mapping[str, Any]],
                       headers: Optional[Mapping[str, str]], body: Optional[str]) -> Any:
        descriptor = spec.descriptor
        tags = {
            "segment": descriptor.segment.value,
            "version": descriptor.version,
            "access": descriptor.access.value,
            "operation": spec.operation,
        }
        self.logger.debug("Request issued", method=spec.method.value, weight=spec.weight, **tags)
        self.logger.metric("bingx_endpoint_weight", spec.weight, tags=tags)

        request_headers: Dict[str, str] = dict(self.config.headers or {})
        request_headers.update(headers or {})

        signed = self.signer.sign(spec.path, descriptor, spec.method, params, request_headers, body)
        response = await self.transport.execute(signed)
        payload = self._parse_response(response)

        classified = self.exception_handler.classify(
            response.status, payload if isinstance(payload, dict) else response.text)
        if classified is not None:
            self.logger.warning("BingX request failed",
                                kind=classified.kind.value,
                                http_status=classified.http_status,
                                venue_code=classified.venue_code,
                                **tags)
            raise classified.to_exception()

        return payload

    @staticmethod
    def _parse_response(response: RawResponse) -> Any:
        """
        Decode the body with msgspec.

        Error statuses with a non-JSON body are left to the classifier;
        a non-JSON body on a success status is an ExchangeError.
        """
        if not response.text:
            return None
        try:
            return msgspec.json.decode(response.text)
        except msgspec.DecodeError:
            if response.status >= 400:
                return None
            raise ExchangeError(response.status, f"Invalid JSON response: {response.text[:100]}")

    async def close(self) -> None:
        """Closes the transport and flushes queued log records."""
        try:
            await self.transport.close()
        finally:
            await self.logger.flush()
