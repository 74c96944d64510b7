"""Base async HTTP client with lazy initialization and context manager support."""

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


class BaseAsyncHttpClient:
    """
    Base async HTTP client with lazy initialization.

    Provides:
    - Lazy httpx.AsyncClient initialization
    - Optional basic auth and default headers
    - Pluggable transport (httpx.MockTransport in tests)
    - Context manager support
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 30.0,
        auth: Optional[tuple[str, str]] = None,
        headers: Optional[dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        follow_redirects: bool = False,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._auth = auth
        self._headers = headers or {}
        self._transport = transport
        self._follow_redirects = follow_redirects
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            kwargs: dict[str, Any] = {
                "base_url": self.base_url,
                "timeout": self.timeout,
                "headers": self._headers,
                "follow_redirects": self._follow_redirects,
            }
            if self._auth:
                kwargs["auth"] = httpx.BasicAuth(*self._auth)
            if self._transport is not None:
                kwargs["transport"] = self._transport
            self._client = httpx.AsyncClient(**kwargs)
            logger.debug(f"Opened HTTP client for {self.base_url or type(self).__name__}")
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
