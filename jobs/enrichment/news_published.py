"""
detect-news-published

News documents without ``publish_date`` get the publication time from the
``time[itemprop=datePublished]`` element of their page.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from core.scraping import extract_published_date
from core.stores import ContentCategory, Document
from core.task_queue import QueueConfig
from jobs.shared import EnrichmentPipeline, JobContext, PipelineReport
from jobs.shared.pages import load_document_html

from .breadcrumbs import EPOCH

logger = logging.getLogger(__name__)

NAME = "detect-news-published"

CANDIDATE_LIMIT = 100

ENRICH_CONFIG = QueueConfig(concurrency=5, retry_count=2, interval_cap=10, interval=1.0)


def candidates_filter(now: datetime) -> dict[str, Any]:
    return {
        "all": [
            {"meta_content_category": ContentCategory.NEWS.value},
            {"none": [{"publish_date": {"from": EPOCH, "to": now.isoformat()}}]},
        ]
    }


def build_pipeline(ctx: JobContext) -> EnrichmentPipeline[Document, Document]:

    async def fetch_candidates() -> list[Document]:
        page = await ctx.client.search_documents(
            size=CANDIDATE_LIMIT,
            filters=candidates_filter(datetime.now(timezone.utc)),
        )
        logger.info(
            f"Detecting publication date for news {len(page.documents)} / {page.page.total_results}"
        )
        return page.documents

    async def enrich(document: Document) -> Optional[dict[str, Any]]:
        tree = await load_document_html(document, ctx.fetcher)
        published = extract_published_date(tree) if tree is not None else None
        if published is None:
            logger.warning(f"Failed to detect publish date for {document.get('url')}")
            return None

        if published.tzinfo is None:
            published = published.replace(tzinfo=timezone.utc)
        return {"id": document["id"], "publish_date": published.isoformat()}

    return EnrichmentPipeline(
        name=NAME,
        fetch_candidates=fetch_candidates,
        enrich=enrich,
        write_batch=ctx.client.update_documents,
        enrich_config=ENRICH_CONFIG,
    )


async def run(ctx: JobContext) -> PipelineReport:
    return await build_pipeline(ctx).run()
