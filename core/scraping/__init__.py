"""Page loading and HTML metadata extraction for document enrichment.

Usage:
    from core.scraping import PageFetcher, parse_html, extract_breadcrumbs

    async with PageFetcher() as fetcher:
        page = await fetcher.fetch(document["url"])
        tree = parse_html(page.text) if page and page.is_html else None
        crumbs = extract_breadcrumbs(tree) if tree is not None else None
"""

from .errors import InvalidUrlError, PageUnavailableError, ScrapingError
from .html import (
    extract_breadcrumbs,
    extract_published_date,
    get_category_attribute,
    get_drupal_current_language,
    get_drupal_settings,
    get_external_id,
    get_head_meta,
    get_html_lang,
    parse_html,
)
from .pages import PAGE_TIMEOUT, PageFetcher, PageResponse, validate_url

__all__ = [
    # Pages
    "PageFetcher",
    "PageResponse",
    "PAGE_TIMEOUT",
    "validate_url",
    # HTML
    "parse_html",
    "get_html_lang",
    "get_head_meta",
    "get_category_attribute",
    "get_drupal_settings",
    "get_drupal_current_language",
    "get_external_id",
    "extract_breadcrumbs",
    "extract_published_date",
    # Errors
    "ScrapingError",
    "PageUnavailableError",
    "InvalidUrlError",
]
