"""Tests for rate limit classification of task errors."""

import httpx

from core.stores import SearchApiError
from core.task_queue import is_rate_limited


def _status_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://search.example.com")
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError(f"HTTP {status}", request=request, response=response)


class _CamelCaseError(Exception):
    def __init__(self, status: int):
        super().__init__(f"status {status}")
        self.statusCode = status


class _BrokenResponseError(Exception):
    @property
    def response(self):
        raise RuntimeError("response not loaded")


class TestIsRateLimited:

    def test_status_code_attribute(self):
        assert is_rate_limited(SearchApiError("Too many requests", status_code=429))
        assert not is_rate_limited(SearchApiError("Bad request", status_code=400))

    def test_response_status(self):
        assert is_rate_limited(_status_error(429))
        assert not is_rate_limited(_status_error(503))

    def test_camel_case_status(self):
        assert is_rate_limited(_CamelCaseError(429))

    def test_unstructured_errors(self):
        assert not is_rate_limited(ValueError("429"))
        assert not is_rate_limited(SearchApiError("No status"))

    def test_raising_attribute_is_not_rate_limited(self):
        assert not is_rate_limited(_BrokenResponseError())
