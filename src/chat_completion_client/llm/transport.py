"""httpx-backed transport implementation."""

import logging
from typing import Optional

import httpx

from .base import BaseTransport, TransportRequest, TransportResponse
from .errors import TransportError

logger = logging.getLogger(__name__)


class HttpxTransport(BaseTransport):
    """Transport that sends requests through a shared httpx.AsyncClient."""

    def __init__(self, timeout: Optional[float] = 60.0, client: Optional[httpx.AsyncClient] = None):
        self.timeout = timeout
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def send(self, request: TransportRequest) -> TransportResponse:
        client = await self._get_client()
        try:
            response = await client.request(
                request.method,
                request.url,
                headers=request.headers,
                content=request.body,
            )
        except httpx.TimeoutException as e:
            logger.warning("Request to %s timed out: %s", request.url, e)
            raise TransportError(f"Request timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.warning("Request to %s failed: %s", request.url, e)
            raise TransportError(f"Request failed: {e}") from e
        return TransportResponse(status=response.status_code, body=response.content)

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None
