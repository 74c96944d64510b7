"""
Sequential driver for page-numbered remote listings.

Pages are requested one after another starting at page 1, and fetching
stops on the page the source reports as its last. A hard page ceiling guards
against sources whose page count keeps growing while they are read.
"""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_PAGES = 10_000


class PaginationDivergenceError(Exception):
    """Paging did not reach the last page within the page ceiling."""

    def __init__(self, message: str, max_pages: int, pages_fetched: int):
        self.message = message
        self.max_pages = max_pages
        self.pages_fetched = pages_fetched
        super().__init__(message)


@dataclass
class Page(Generic[T]):
    """One page of results as reported by the remote source."""

    items: list[T] = field(default_factory=list)
    current_page: int = 1
    total_pages: int = 0


PageRequest = Callable[[int], Awaitable[Page[T]]]


async def fetch_all(
    request_page: PageRequest[T],
    max_pages: int = DEFAULT_MAX_PAGES,
) -> list[T]:
    """Fetch every page and return the items in page order.

    Stops once the reported current page reaches the reported total, so a
    source with P pages gets exactly P requests. A source reporting zero
    pages yields an empty list after the first request.

    Args:
        request_page: Coroutine function taking a 1-based page number
        max_pages: Safety ceiling on the number of requests

    Returns:
        Items of all pages concatenated

    Raises:
        PaginationDivergenceError: More than ``max_pages`` pages were needed
    """
    items: list[T] = []
    page_number = 1

    while True:
        if page_number > max_pages:
            raise PaginationDivergenceError(
                f"Pagination did not converge within {max_pages} pages",
                max_pages=max_pages,
                pages_fetched=page_number - 1,
            )

        logger.debug(f"Requesting page {page_number}")
        page = await request_page(page_number)
        items.extend(page.items)

        if page.total_pages <= 0 or page.current_page >= page.total_pages:
            break
        page_number += 1

    logger.debug(f"Fetched {len(items)} items from {page_number} pages")
    return items
