"""
detect-breadcrumbs

www.hel.fi documents without ``breadcrumbs_updated`` get the breadcrumb trail
of their page. Pages without breadcrumbs are left for the next run.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from core.scraping import extract_breadcrumbs
from core.stores import Document
from core.task_queue import QueueConfig
from jobs.shared import EnrichmentPipeline, JobContext, PipelineReport
from jobs.shared.pages import load_document_html

logger = logging.getLogger(__name__)

NAME = "detect-breadcrumbs"

CANDIDATE_LIMIT = 100
# Lower bound of date range filters; App Search needs both ends
EPOCH = "1900-01-01T12:00:00+00:00"

ENRICH_CONFIG = QueueConfig(concurrency=5, retry_count=2, interval_cap=10, interval=1.0)


def candidates_filter(now: datetime) -> dict[str, Any]:
    return {
        "all": [
            {"url_host": "www.hel.fi"},
            {"none": [{"breadcrumbs_updated": {"from": EPOCH, "to": now.isoformat()}}]},
        ]
    }


def build_pipeline(ctx: JobContext) -> EnrichmentPipeline[Document, Document]:

    async def fetch_candidates() -> list[Document]:
        page = await ctx.client.search_documents(
            size=CANDIDATE_LIMIT,
            filters=candidates_filter(datetime.now(timezone.utc)),
        )
        logger.info(f"Detecting breadcrumbs for {len(page.documents)} / {page.page.total_results}")
        return page.documents

    async def enrich(document: Document) -> Optional[dict[str, Any]]:
        tree = await load_document_html(document, ctx.fetcher)
        breadcrumbs = extract_breadcrumbs(tree) if tree is not None else None
        if not breadcrumbs:
            logger.warning(f"Failed to resolve breadcrumbs for {document.get('url')}")
            return None

        return {
            "id": document["id"],
            "breadcrumbs": breadcrumbs,
            "breadcrumbs_updated": datetime.now(timezone.utc).isoformat(),
        }

    return EnrichmentPipeline(
        name=NAME,
        fetch_candidates=fetch_candidates,
        enrich=enrich,
        write_batch=ctx.client.update_documents,
        enrich_config=ENRICH_CONFIG,
    )


async def run(ctx: JobContext) -> PipelineReport:
    return await build_pipeline(ctx).run()
