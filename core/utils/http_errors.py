"""Translating httpx failures into client-specific exceptions."""

import logging
from typing import Any, Optional, Protocol

import httpx

logger = logging.getLogger(__name__)


class HttpErrorFactory(Protocol):
    """Exception class accepting a message and an optional HTTP status."""

    def __call__(self, message: str, status_code: Optional[int] = None) -> Exception: ...


async def safe_http_request(
    client: httpx.AsyncClient,
    method: str,
    path: str,
    error_class: HttpErrorFactory,
    **kwargs: Any,
) -> httpx.Response:
    """
    Send a request and raise ``error_class`` for anything but a 2xx answer.

    Status failures keep their HTTP status on the raised error
    (``status_code``), which the task queue reads to spot rate limiting.
    Transport failures carry no status. The httpx error is chained.

    Args:
        client: Open httpx.AsyncClient
        method: HTTP method
        path: Path relative to the client's base URL
        error_class: Exception type raised on failure
        **kwargs: Passed through to ``client.request``

    Returns:
        The successful response
    """
    target = f"{method} {client.base_url}{path}"
    try:
        response = await client.request(method, path, **kwargs)
        response.raise_for_status()
        return response
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        # Client errors (429 throttling, 404 lookups) are routine for callers
        log = logger.warning if status < 500 else logger.error
        log(f"HTTP {status} for {target}")
        raise error_class(f"HTTP {status}: {e.response.text}", status_code=status) from e
    except httpx.TimeoutException as e:
        logger.error(f"Timeout for {target}: {e}")
        raise error_class(f"Request timeout: {e}") from e
    except httpx.HTTPError as e:
        logger.error(f"Request failed for {target}: {e}")
        raise error_class(f"Request failed: {e}") from e
