import logging
from typing import Optional

import httpx

from lumina_library.config import settings

logger = logging.getLogger(__name__)


class PooledHTTPClient:
    """Async HTTP client with connection pooling, shared by outbound services."""

    def __init__(self, timeout: Optional[float] = None):
        limits = httpx.Limits(
            max_keepalive_connections=10,
            max_connections=20,
            keepalive_expiry=30.0
        )

        # Transport default only; no retry policy on top of it
        timeout = httpx.Timeout(timeout or settings.insight_timeout, connect=5.0)

        self._client = httpx.AsyncClient(
            limits=limits,
            timeout=timeout,
            follow_redirects=True,
        )

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def post(self, url: str, **kwargs) -> httpx.Response:
        """Async POST through the shared pool."""
        return await self._client.post(url, **kwargs)

    async def close(self):
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


# Process-wide client
_global_client: Optional[PooledHTTPClient] = None


async def get_http_client() -> PooledHTTPClient:
    """Get or create the process-wide HTTP client."""
    global _global_client
    if _global_client is None or _global_client.is_closed:
        _global_client = PooledHTTPClient()
        logger.debug("Shared HTTP client opened")
    return _global_client


async def cleanup_http_client():
    """Close the process-wide HTTP client."""
    global _global_client
    if _global_client:
        await _global_client.close()
        _global_client = None
        logger.debug("Shared HTTP client closed")
