"""Custom exceptions for the App Search client."""

from typing import Any, Optional


class SearchApiError(Exception):
    """Request to the App Search API failed.

    ``status_code`` holds the HTTP status when the server answered, which
    is what the task queue inspects to detect rate limiting.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DocumentWriteError(SearchApiError):
    """Batch write was accepted but some documents were rejected."""

    def __init__(self, message: str, errors: Optional[dict[str, list[Any]]] = None):
        super().__init__(message)
        self.errors = errors or {}
