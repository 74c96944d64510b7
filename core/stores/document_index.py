"""
Direct Elasticsearch access to an App Search engine's backing index.

App Search cannot express "field missing or older than N days" filters on
date fields, so purge candidates are queried from the underlying index
(``.ent-search-engine-documents-{engine}``) with the Elasticsearch client.
"""

import logging
from typing import Any, Optional

from elasticsearch import AsyncElasticsearch
from pydantic import BaseModel

logger = logging.getLogger(__name__)

ENGINE_INDEX_PREFIX = ".ent-search-engine-documents-"
DEFAULT_CANDIDATE_LIMIT = 1000


class IndexedDocumentRef(BaseModel):
    """Id and URL of a crawled document."""

    id: str
    url: str


def build_purge_candidates_query(check_interval_days: int) -> dict[str, Any]:
    """Crawled documents with a URL whose purge check is older than the interval."""
    return {
        "bool": {
            "must": [
                {"exists": {"field": "last_crawled_at"}},
                {"exists": {"field": "url"}},
            ],
            "must_not": [
                {
                    "range": {
                        "purge_last_checked_at.date": {
                            "gte": f"now-{check_interval_days}d/d",
                            "lte": "now",
                        }
                    }
                }
            ],
        }
    }


class DocumentIndex:
    """
    Query helper for the engine's backing Elasticsearch index.

    Example:
        async with DocumentIndex("http://localhost:9200", "helsinki") as index:
            refs = await index.find_purge_candidates(check_interval_days=7)
    """

    def __init__(
        self,
        host: str,
        engine_name: str,
        auth: Optional[tuple[str, str]] = None,
        request_timeout: int = 30,
        client: Optional[AsyncElasticsearch] = None,
    ):
        self.index_name = f"{ENGINE_INDEX_PREFIX}{engine_name}"
        self._client = client or AsyncElasticsearch(
            hosts=[host],
            basic_auth=auth,
            request_timeout=request_timeout,
            max_retries=3,
            retry_on_timeout=True,
        )

    @classmethod
    def from_settings(cls, settings, **kwargs) -> "DocumentIndex":
        return cls(
            host=settings.elasticsearch_url,
            engine_name=settings.elastic_app_engine,
            auth=(settings.elastic_admin_username, settings.elastic_admin_password),
            **kwargs,
        )

    async def find_purge_candidates(
        self,
        check_interval_days: int,
        size: int = DEFAULT_CANDIDATE_LIMIT,
    ) -> list[IndexedDocumentRef]:
        """Crawled documents that have not been checked for purging recently.

        Args:
            check_interval_days: Documents checked within this many days are skipped
            size: Maximum number of documents returned

        Returns:
            Id and URL of every candidate document

        Raises:
            ValueError: The response has no hits
        """
        response = await self._client.search(
            index=self.index_name,
            query=build_purge_candidates_query(check_interval_days),
            source=["id", "url"],
            size=size,
        )

        if "hits" not in response or "hits" not in response["hits"]:
            raise ValueError(f"No hits in response from {self.index_name}")
        hits = response["hits"]["hits"]

        refs = []
        for hit in hits:
            source = hit.get("_source", {})
            if not source.get("id") or not source.get("url"):
                logger.warning(f"Skipping hit {hit.get('_id')} without id or url")
                continue
            refs.append(IndexedDocumentRef(id=source["id"], url=source["url"]))

        logger.debug(f"Found {len(refs)} purge candidates in {self.index_name}")
        return refs

    async def close(self) -> None:
        await self._client.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
