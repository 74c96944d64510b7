"""
Pytest configuration for curator tests.

Every test module is a logging run, so per-module log files rotate at test
module boundaries. HTTP is faked with httpx.MockTransport handlers.

Usage:
    pytest testing/
    pytest testing/test_task_queue.py -k interval
"""

import os
from collections.abc import Generator
from typing import Callable

import httpx
import pytest

from core.logging import logging_run
from core.scraping import PageFetcher
from core.stores import AppSearchClient
from testing.utils.http import Handler


@pytest.fixture(autouse=True)
def module_log_run(request: pytest.FixtureRequest) -> Generator[None, None, None]:
    """Rotate logs at test module boundaries.

    When running with pytest-xdist, each worker uses a separate log directory
    to prevent file corruption from concurrent writes.
    """
    worker_id = os.environ.get("PYTEST_XDIST_WORKER")
    if worker_id:
        os.environ["CURATOR_LOG_DIR"] = f"logs/test-{worker_id}"

    # Use test module path as run identifier (e.g., "test-testing-test_retry")
    test_path = request.node.nodeid.split("::")[0]
    test_name = test_path.replace("/", "-").replace(".py", "")
    with logging_run(f"test-{test_name}"):
        yield


@pytest.fixture
def app_search() -> Callable[[Handler], AppSearchClient]:
    """Build an AppSearchClient whose requests go to a handler function."""

    def build(handler: Handler) -> AppSearchClient:
        return AppSearchClient(
            "https://search.example.com",
            "test-engine",
            username="admin",
            password="secret",
            transport=httpx.MockTransport(handler),
        )

    return build


@pytest.fixture
def page_fetcher() -> Callable[[Handler], PageFetcher]:
    """Build a PageFetcher whose requests go to a handler function."""

    def build(handler: Handler) -> PageFetcher:
        return PageFetcher(transport=httpx.MockTransport(handler))

    return build
