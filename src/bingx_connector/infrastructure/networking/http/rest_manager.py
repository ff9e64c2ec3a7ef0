"""
REST Transport Manager

Owns the aiohttp session and executes already-signed requests. It knows
nothing about venues: responses come back raw for the caller to decode
and classify.
"""

import asyncio
from typing import Optional

import aiohttp

from ...decorators.retry import retry_decorator
from ...exceptions.exchange import ExchangeNetworkError
from ...logging import get_logger
from .structs import RawResponse, SignedRequest


class RestManager:
    """
    REST transport with lazy session creation.

    Usable as an async context manager; ``close()`` releases the session.
    """

    DEFAULT_HEADERS = {
        'User-Agent': 'bingx-connector/1.0',
        'Accept': 'application/json',
        'Accept-Encoding': 'gzip, deflate',
    }

    def __init__(self, request_timeout: float = 10.0, connect_timeout: float = 5.0,
                 max_attempts: int = 3, retry_delay: float = 0.1, max_concurrent: int = 50,
                 session: Optional[aiohttp.ClientSession] = None):
        self.request_timeout = request_timeout
        self.connect_timeout = connect_timeout
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.max_concurrent = max_concurrent

        self._session = session
        self._owns_session = session is None

        self.logger = get_logger('bingx_connector.rest_manager')

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=100,
                limit_per_host=self.max_concurrent,
                ttl_dns_cache=300,
            )
            timeout = aiohttp.ClientTimeout(
                total=self.request_timeout,
                connect=self.connect_timeout,
                sock_connect=self.connect_timeout,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=timeout,
                headers=self.DEFAULT_HEADERS
            )
            self._owns_session = True
        return self._session

    async def execute(self, request: SignedRequest) -> RawResponse:
        """
        Execute a signed request.

        Connection errors and timeouts are retried with exponential backoff;
        once attempts are exhausted they surface as ExchangeNetworkError.
        HTTP error statuses are returned as-is.
        """
        try:
            return await self._execute_with_retry(request)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.logger.error("Transport failure",
                              method=request.method.value,
                              url=request.url.split('?', 1)[0],
                              error_type=type(e).__name__)
            raise ExchangeNetworkError(None, f"Request failed: {type(e).__name__}: {e}") from e

    @retry_decorator(backoff="exponential", base_delay=0.1, max_delay=5.0)
    async def _execute_with_retry(self, request: SignedRequest) -> RawResponse:
        session = await self._ensure_session()

        kwargs = {'headers': dict(request.headers)}
        if request.body is not None:
            kwargs['data'] = request.body
            kwargs['headers'].setdefault('Content-Type', 'application/x-www-form-urlencoded')

        async with session.request(request.method.value, request.url, **kwargs) as response:
            text = await response.text()
            return RawResponse(
                status=response.status,
                text=text,
                headers=dict(response.headers)
            )

    async def close(self):
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None
        self.logger.debug("RestManager closed")
