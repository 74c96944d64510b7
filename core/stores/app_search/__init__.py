"""
Elastic App Search engine client.

Usage:
    from core.stores.app_search import AppSearchClient

    async with AppSearchClient(url, engine, username, password) as client:
        documents = await client.get_paginated_documents(filters=...)
        await client.update_documents([{"id": documents[0]["id"], "language": "fi"}])
"""

from .client import MAX_DOCUMENTS_PER_REQUEST, MAX_PAGE_SIZE, AppSearchClient
from .documents import search_result_to_document, search_results_to_documents
from .errors import DocumentWriteError, SearchApiError
from .schemas import (
    ContentCategory,
    CrawlerDomain,
    CrawlRule,
    Curation,
    Document,
    DocumentDeleteResult,
    DocumentWriteResult,
    PageMeta,
    SearchPage,
)

__all__ = [
    "AppSearchClient",
    "MAX_DOCUMENTS_PER_REQUEST",
    "MAX_PAGE_SIZE",
    # Documents
    "Document",
    "search_result_to_document",
    "search_results_to_documents",
    "DocumentWriteResult",
    "DocumentDeleteResult",
    "SearchPage",
    "PageMeta",
    # Resources
    "ContentCategory",
    "Curation",
    "CrawlerDomain",
    "CrawlRule",
    # Errors
    "SearchApiError",
    "DocumentWriteError",
]
