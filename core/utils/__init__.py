"""Core utilities for async HTTP clients, timeouts and error handling."""

from .async_http_client import BaseAsyncHttpClient
from .async_utils import chunked, with_timeout
from .http_errors import safe_http_request

__all__ = [
    "BaseAsyncHttpClient",
    "safe_http_request",
    "chunked",
    "with_timeout",
]
