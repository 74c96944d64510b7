"""
Fetching crawled pages for enrichment.

Page loads are raced against a timer and resolve to None when the page does
not answer in time or cannot be reached, so a hanging site only costs one
task its timeout. HEAD checks report reachability for purge jobs.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

import httpx

from core.utils import BaseAsyncHttpClient, with_timeout

from .errors import InvalidUrlError

logger = logging.getLogger(__name__)

PAGE_TIMEOUT = 10.0
# Upper bound of the random delay before HEAD checks
HEAD_JITTER = 0.5

USER_AGENT = "search-curator/0.1 (+https://www.hel.fi)"


@dataclass
class PageResponse:
    """Fetched page."""

    url: str
    status_code: int
    content_type: str
    text: str

    @property
    def is_html(self) -> bool:
        return self.content_type.startswith("text/html")


def validate_url(url: object) -> str:
    """Return the URL if it is an absolute http(s) URL.

    Raises:
        InvalidUrlError: Not a string, or not an absolute http(s) URL
    """
    if not isinstance(url, str):
        raise InvalidUrlError(f"Non-string URL {url!r}")
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise InvalidUrlError(f"Invalid URL {url}", url=url)
    return url


class PageFetcher(BaseAsyncHttpClient):
    """
    HTTP client for crawled pages.

    Example:
        async with PageFetcher() as fetcher:
            page = await fetcher.fetch("https://www.hel.fi/fi/uutiset")
            if page and page.is_html:
                ...
    """

    def __init__(
        self,
        timeout: float = PAGE_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
            transport=transport,
            follow_redirects=True,
        )

    async def fetch(self, url: str, timeout: Optional[float] = None) -> Optional[PageResponse]:
        """Load a page.

        Args:
            url: Absolute page URL
            timeout: Seconds before giving up (default: client timeout)

        Returns:
            The page whatever its status, or None on timeout or network error

        Raises:
            InvalidUrlError: URL is not an absolute http(s) URL
        """
        validate_url(url)
        seconds = timeout if timeout is not None else self.timeout
        try:
            return await with_timeout(self._get(url), seconds, label=f"GET {url}")
        except httpx.HTTPError as e:
            logger.warning(f"Failed to load {url}: {e}")
            return None

    async def _get(self, url: str) -> PageResponse:
        client = await self._get_client()
        response = await client.get(url)
        return PageResponse(
            url=str(response.url),
            status_code=response.status_code,
            content_type=response.headers.get("content-type", ""),
            text=response.text,
        )

    async def head_status(self, url: str) -> Optional[int]:
        """HTTP status of a HEAD request, or None if the URL is unreachable."""
        validate_url(url)
        client = await self._get_client()
        try:
            response = await client.head(url)
        except httpx.HTTPError as e:
            logger.info(f"HEAD {url} failed: {e}")
            return None
        return response.status_code

    async def is_accessible(self, url: str, jitter: float = HEAD_JITTER) -> bool:
        """Whether a HEAD request to the URL answers 200.

        Sleeps a random time below ``jitter`` seconds first to spread out
        requests to the same site.
        """
        if jitter > 0:
            await asyncio.sleep(random.random() * jitter)
        return await self.head_status(url) == 200
