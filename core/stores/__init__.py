from .app_search import (
    AppSearchClient,
    ContentCategory,
    CrawlerDomain,
    CrawlRule,
    Curation,
    Document,
    DocumentWriteError,
    SearchApiError,
)
from .document_index import DocumentIndex, IndexedDocumentRef
from .pagination import (
    DEFAULT_MAX_PAGES,
    Page,
    PaginationDivergenceError,
    fetch_all,
)

__all__ = [
    # App Search
    "AppSearchClient",
    "ContentCategory",
    "CrawlerDomain",
    "CrawlRule",
    "Curation",
    "Document",
    "DocumentWriteError",
    "SearchApiError",
    # Elasticsearch
    "DocumentIndex",
    "IndexedDocumentRef",
    # Pagination
    "DEFAULT_MAX_PAGES",
    "Page",
    "PaginationDivergenceError",
    "fetch_all",
]
