"""
purge-crawled-documents

Crawled documents whose purge check has expired are deleted when their URL
no longer fits the crawl rules of its domain, or no longer answers 200 to a
HEAD request. Documents that pass get ``purge_last_checked_at`` stamped so
they are skipped until the check interval passes again.

In dry-run mode nothing is written; the documents that would be purged are
logged and reported as planned. Deleted documents count as updated, the ones
that pass as unchanged.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from core.stores import CrawlerDomain, IndexedDocumentRef
from core.task_queue import QueueConfig
from jobs.shared import BatchWrite, EnrichmentPipeline, JobContext, PipelineReport

from .crawl_rules import matches_crawl_rules

logger = logging.getLogger(__name__)

NAME = "purge-crawled-documents"

PURGE_BATCH_SIZE = 50

ENRICH_CONFIG = QueueConfig(concurrency=10, retry_count=2)


@dataclass
class PurgeDecision:
    """Whether one crawled document should be deleted, and why."""

    document: IndexedDocumentRef
    purge: bool
    reason: str = ""

    @property
    def id(self) -> str:
        return self.document.id


def build_pipeline(ctx: JobContext) -> EnrichmentPipeline[IndexedDocumentRef, PurgeDecision]:
    domains: list[CrawlerDomain] = []

    async def fetch_candidates() -> list[IndexedDocumentRef]:
        refs = await ctx.require_index().find_purge_candidates(ctx.purge_check_interval_days)
        if refs:
            domains[:] = await ctx.client.list_crawler_domains()
            logger.info(f"Checking {len(refs)} documents against {len(domains)} crawler domains")
        return refs

    async def decide(ref: IndexedDocumentRef) -> PurgeDecision:
        if not matches_crawl_rules(ref.url, domains):
            return PurgeDecision(ref, purge=True, reason="crawl rules")
        if not await ctx.fetcher.is_accessible(ref.url):
            return PurgeDecision(ref, purge=True, reason="not accessible")
        return PurgeDecision(ref, purge=False)

    async def write_batch(decisions: list[PurgeDecision]) -> BatchWrite:
        purge = [decision for decision in decisions if decision.purge]
        keep = [decision for decision in decisions if not decision.purge]

        if ctx.dry_run:
            for decision in purge:
                logger.info(f"Would have purged {decision.document.url} ({decision.reason})")
            return BatchWrite(unchanged=len(keep), planned=len(purge))

        deleted = 0
        if purge:
            results = await ctx.client.delete_documents([decision.id for decision in purge])
            deleted = sum(1 for result in results if result.deleted)
            logger.info(f"Purged {deleted} documents")

        if keep:
            checked_at = datetime.now(timezone.utc).isoformat()
            await ctx.client.update_documents(
                [{"id": decision.id, "purge_last_checked_at": checked_at} for decision in keep]
            )

        return BatchWrite(written=deleted, unchanged=len(keep))

    return EnrichmentPipeline(
        name=NAME,
        fetch_candidates=fetch_candidates,
        enrich=decide,
        write_batch=write_batch,
        enrich_config=ENRICH_CONFIG,
        batch_size=PURGE_BATCH_SIZE,
    )


async def run(ctx: JobContext) -> PipelineReport:
    if ctx.dry_run:
        logger.info("Running in dry run mode")
    return await build_pipeline(ctx).run()

