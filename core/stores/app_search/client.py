"""
Async client for the Elastic App Search REST API.

Covers the engine resources the curation jobs work with:
- POST   /search                 Search documents
- GET    /documents              Find documents by id
- POST   /documents              Index (create or replace) documents
- PATCH  /documents              Partially update documents
- DELETE /documents              Delete documents by id
- /curations                     Curation CRUD
- GET    /crawler/domains        Crawler domains and their crawl rules

All paths are relative to ``/api/as/v1/engines/{engine}``.
"""

import logging
from typing import Any, Optional, Sequence

import httpx

from core.stores.pagination import DEFAULT_MAX_PAGES, Page, fetch_all
from core.utils import BaseAsyncHttpClient, safe_http_request

from .documents import search_results_to_documents
from .errors import DocumentWriteError, SearchApiError
from .schemas import (
    CrawlerDomain,
    Curation,
    Document,
    DocumentDeleteResult,
    DocumentWriteResult,
    PageMeta,
    SearchPage,
)

logger = logging.getLogger(__name__)

# Hard limit of the documents API per request
MAX_DOCUMENTS_PER_REQUEST = 100
# Largest page size the search API accepts
MAX_PAGE_SIZE = 1000


class AppSearchClient(BaseAsyncHttpClient):
    """
    Async client for one App Search engine.

    Example:
        async with AppSearchClient(url, "helsinki", username, password) as client:
            page = await client.search_documents(filters={"all": [{"url_host": "www.hel.fi"}]})
            for document in page.documents:
                print(document["id"], document.get("title"))
    """

    def __init__(
        self,
        base_url: str,
        engine_name: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else None
        auth = (username, password) if username and password and not api_key else None
        super().__init__(
            base_url=base_url,
            timeout=timeout,
            auth=auth,
            headers=headers,
            transport=transport,
        )
        self.engine_name = engine_name

    @classmethod
    def from_settings(cls, settings, **kwargs) -> "AppSearchClient":
        """Build a client for the configured engine with admin credentials."""
        return cls(
            base_url=settings.elastic_url,
            engine_name=settings.elastic_app_engine,
            username=settings.elastic_admin_username,
            password=settings.elastic_admin_password,
            **kwargs,
        )

    def _path(self, resource: str) -> str:
        return f"/api/as/v1/engines/{self.engine_name}/{resource.lstrip('/')}"

    async def _request(self, method: str, resource: str, **kwargs: Any) -> Any:
        client = await self._get_client()
        response = await safe_http_request(
            client, method, self._path(resource), SearchApiError, **kwargs
        )
        if not response.content:
            return None
        return response.json()

    # -------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------

    async def search(
        self,
        query: str = "",
        page: int = 1,
        size: int = MAX_PAGE_SIZE,
        filters: Optional[dict[str, Any]] = None,
        sort: Optional[list[dict[str, str]]] = None,
    ) -> dict[str, Any]:
        """Run a search and return the raw response.

        Args:
            query: Full-text query; empty string matches everything
            page: 1-based page number
            size: Results per page (max 1000)
            filters: App Search filter object
            sort: List of ``{field: "asc"|"desc"}`` objects

        Returns:
            Response with ``meta.page`` and raw ``results``
        """
        body: dict[str, Any] = {
            "query": query,
            "page": {"current": page, "size": min(size, MAX_PAGE_SIZE)},
        }
        if filters:
            body["filters"] = filters
        if sort:
            body["sort"] = sort

        return await self._request("POST", "search", json=body)

    async def search_documents(
        self,
        query: str = "",
        page: int = 1,
        size: int = MAX_PAGE_SIZE,
        filters: Optional[dict[str, Any]] = None,
        sort: Optional[list[dict[str, str]]] = None,
    ) -> SearchPage:
        """Run a search and flatten the results to documents."""
        response = await self.search(query, page=page, size=size, filters=filters, sort=sort)
        meta = (response or {}).get("meta", {}).get("page", {})
        return SearchPage(
            documents=search_results_to_documents((response or {}).get("results", [])),
            page=PageMeta.model_validate(meta),
        )

    async def get_paginated_documents(
        self,
        query: str = "",
        filters: Optional[dict[str, Any]] = None,
        sort: Optional[list[dict[str, str]]] = None,
        page_size: int = MAX_PAGE_SIZE,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> list[Document]:
        """Fetch every page of a search, sequentially.

        Raises:
            PaginationDivergenceError: The page count never converged
            SearchApiError: A page request failed
        """

        async def request_page(page_number: int) -> Page[Document]:
            result = await self.search_documents(
                query, page=page_number, size=page_size, filters=filters, sort=sort
            )
            return Page(
                items=result.documents,
                current_page=result.page.current,
                total_pages=result.page.total_pages,
            )

        return await fetch_all(request_page, max_pages=max_pages)

    # -------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------

    async def find_document(self, document_id: str) -> Optional[Document]:
        """Get a single document, or None if it does not exist."""
        response = await self._request("GET", "documents", params={"ids[]": [document_id]})
        documents = [doc for doc in (response or []) if doc]
        return documents[0] if len(documents) == 1 else None

    async def get_documents(self, document_ids: Sequence[str]) -> list[Document]:
        """Get documents by id, skipping ids that do not exist."""
        if not document_ids:
            return []
        response = await self._request("GET", "documents", params={"ids[]": list(document_ids)})
        return [doc for doc in (response or []) if doc]

    async def index_documents(self, documents: Sequence[Document]) -> list[DocumentWriteResult]:
        """Create or replace documents."""
        return await self._write_documents("POST", documents)

    async def update_documents(self, documents: Sequence[Document]) -> list[DocumentWriteResult]:
        """Partially update existing documents.

        Each document must carry its ``id``; only the given fields change.

        Raises:
            ValueError: More than 100 documents, or a document without id
            DocumentWriteError: The API rejected some of the documents
            SearchApiError: The request failed
        """
        for document in documents:
            if not document.get("id"):
                raise ValueError("Every document in an update needs an id")
        return await self._write_documents("PATCH", documents)

    async def _write_documents(
        self, method: str, documents: Sequence[Document]
    ) -> list[DocumentWriteResult]:
        if len(documents) > MAX_DOCUMENTS_PER_REQUEST:
            raise ValueError(
                f"At most {MAX_DOCUMENTS_PER_REQUEST} documents per request, got {len(documents)}"
            )
        if not documents:
            return []

        response = await self._request(method, "documents", json=list(documents))
        results = [DocumentWriteResult.model_validate(item) for item in response or []]

        failed = {result.id or "?": result.errors for result in results if not result.ok}
        if failed:
            raise DocumentWriteError(
                f"{len(failed)}/{len(results)} documents rejected", errors=failed
            )

        logger.debug(f"{method} wrote {len(results)} documents to {self.engine_name}")
        return results

    async def delete_documents(self, document_ids: Sequence[str]) -> list[DocumentDeleteResult]:
        """Delete documents by id.

        Returns:
            One result per id; ``deleted`` is False for ids that did not exist
        """
        if len(document_ids) > MAX_DOCUMENTS_PER_REQUEST:
            raise ValueError(
                f"At most {MAX_DOCUMENTS_PER_REQUEST} documents per request, got {len(document_ids)}"
            )
        if not document_ids:
            return []

        response = await self._request("DELETE", "documents", json=list(document_ids))
        return [DocumentDeleteResult.model_validate(item) for item in response or []]

    # -------------------------------------------------------------------
    # Curations
    # -------------------------------------------------------------------

    async def create_curation(self, curation: Curation) -> str:
        """Create a curation and return its id."""
        response = await self._request(
            "POST", "curations", json=curation.model_dump(exclude={"id"})
        )
        return response["id"]

    async def update_curation(self, curation_id: str, curation: Curation) -> str:
        """Replace the queries and documents of a curation."""
        response = await self._request(
            "PUT", f"curations/{curation_id}", json=curation.model_dump(exclude={"id"})
        )
        return (response or {}).get("id", curation_id)

    async def delete_curation(self, curation_id: str) -> None:
        await self._request("DELETE", f"curations/{curation_id}")

    async def find_curation(self, curation_id: str) -> Optional[Curation]:
        """Get a curation, or None if it does not exist."""
        try:
            response = await self._request("GET", f"curations/{curation_id}")
        except SearchApiError as e:
            if e.status_code == 404:
                return None
            raise
        return Curation.model_validate(response)

    async def list_curations(self, page_size: int = 25) -> list[Curation]:
        """List all curations of the engine."""

        async def request_page(page_number: int) -> Page[Curation]:
            response = await self._request(
                "GET", "curations", params={"page[current]": page_number, "page[size]": page_size}
            )
            meta = PageMeta.model_validate(response.get("meta", {}).get("page", {}))
            return Page(
                items=[Curation.model_validate(item) for item in response.get("results", [])],
                current_page=meta.current,
                total_pages=meta.total_pages,
            )

        return await fetch_all(request_page)

    async def has_curations_access(self) -> bool:
        """Whether the credentials may manage curations.

        Checked by listing a single curation; any API error means no access.
        """
        try:
            response = await self._request(
                "GET", "curations", params={"page[current]": 1, "page[size]": 1}
            )
        except SearchApiError as e:
            logger.info(f"No curations access on {self.engine_name}: {e.message}")
            return False
        return bool(response and "results" in response)

    # -------------------------------------------------------------------
    # Crawler
    # -------------------------------------------------------------------

    async def list_crawler_domains(self, page_size: int = 25) -> list[CrawlerDomain]:
        """List crawler domains with their crawl rules."""

        async def request_page(page_number: int) -> Page[CrawlerDomain]:
            response = await self._request(
                "GET",
                "crawler/domains",
                params={"page[current]": page_number, "page[size]": page_size},
            )
            meta = PageMeta.model_validate(response.get("meta", {}).get("page", {}))
            return Page(
                items=[CrawlerDomain.model_validate(item) for item in response.get("results", [])],
                current_page=meta.current,
                total_pages=meta.total_pages,
            )

        return await fetch_all(request_page)
