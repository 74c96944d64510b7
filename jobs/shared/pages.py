"""Loading the crawled page behind a search document."""

import logging
from typing import Any, Optional

from lxml import html

from core.scraping import PageFetcher, PageResponse, PageUnavailableError, parse_html

logger = logging.getLogger(__name__)


async def load_document_page(document: dict[str, Any], fetcher: PageFetcher) -> PageResponse:
    """Fetch the page at the document's URL.

    Raises:
        InvalidUrlError: The document has no usable URL
        PageUnavailableError: The page timed out or could not be reached
    """
    url = document.get("url")
    page = await fetcher.fetch(url)
    if page is None:
        raise PageUnavailableError(f"Page did not respond: {url}", url=url)
    return page


async def load_document_html(
    document: dict[str, Any], fetcher: PageFetcher
) -> Optional[html.HtmlElement]:
    """Parsed markup of the document's page, or None if it is not HTML."""
    page = await load_document_page(document, fetcher)
    if not page.is_html:
        logger.debug(f"{page.url} is {page.content_type or 'untyped'}, not HTML")
        return None
    return parse_html(page.text)
