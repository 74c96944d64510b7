"""
Shared fakes for curator tests.

- Response builders for App Search and crawled pages (httpx.MockTransport)
- RequestLog: records requests made through a mock transport
- FakeDocumentIndex: stands in for the Elasticsearch purge candidate query
"""

from .http import (
    RequestLog,
    html_response,
    json_response,
    search_response,
    wrap_raw,
)
from .index import FakeDocumentIndex

__all__ = [
    "RequestLog",
    "html_response",
    "json_response",
    "search_response",
    "wrap_raw",
    "FakeDocumentIndex",
]
