"""Clients and settings shared by the jobs of one run."""

import logging
from dataclasses import dataclass
from typing import Optional

from core.config import ConfigurationError, Settings
from core.scraping import PageFetcher
from core.stores import AppSearchClient, DocumentIndex

logger = logging.getLogger(__name__)


@dataclass
class JobContext:
    """Everything a job needs to talk to the outside world.

    Tests build one directly with fake clients; the CLI builds one from
    settings with ``from_settings``.
    """

    client: AppSearchClient
    fetcher: PageFetcher
    index: Optional[DocumentIndex] = None
    dry_run: bool = False
    purge_check_interval_days: int = 7

    @classmethod
    def from_settings(cls, settings: Settings, dry_run: bool = False) -> "JobContext":
        index = DocumentIndex.from_settings(settings) if settings.elasticsearch_url else None
        return cls(
            client=AppSearchClient.from_settings(settings),
            fetcher=PageFetcher(),
            index=index,
            dry_run=dry_run or settings.purge_crawled_documents_dry_run,
            purge_check_interval_days=settings.purge_check_interval_in_days,
        )

    def require_index(self) -> DocumentIndex:
        if self.index is None:
            raise ConfigurationError("ELASTICSEARCH_URL is required for this job", fields=["elasticsearch_url"])
        return self.index

    async def close(self) -> None:
        await self.client.close()
        await self.fetcher.close()
        if self.index is not None:
            await self.index.close()
        logger.debug("Job context closed")

    async def __aenter__(self) -> "JobContext":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
