"""
add-category-to-documents

Uncategorized www.hel.fi documents get a ``meta_content_category`` from the
Drupal content type in their page head. Service pages also get their
``external_service_id``.
"""

import logging
from typing import Any, Collection, Optional

from core.scraping import get_category_attribute
from core.stores import ContentCategory, Document
from core.task_queue import QueueConfig
from jobs.shared import EnrichmentPipeline, JobContext, PipelineReport
from jobs.shared.pages import load_document_html

from .external_ids import resolve_external_service_id

logger = logging.getLogger(__name__)

NAME = "add-category-to-documents"

CANDIDATE_LIMIT = 1000

CATEGORY_BY_CONTENT_TYPE = {
    "news_item": ContentCategory.NEWS,
    "tpr_unit": ContentCategory.UNIT,
    "tpr_service": ContentCategory.SERVICE,
}

# Page loads hit www.hel.fi directly
ENRICH_CONFIG = QueueConfig(
    concurrency=10,
    retry_count=2,
    interval_cap=10,
    interval=1.0,
    carryover_concurrency=True,
)


def content_category(content_type: Optional[str]) -> ContentCategory:
    """Map a Drupal content type to a document category."""
    return CATEGORY_BY_CONTENT_TYPE.get(content_type or "", ContentCategory.UNCATEGORIZED)


def uncategorized_filter() -> dict[str, Any]:
    return {
        "all": [
            {"url_host": "www.hel.fi"},
            {"none": {"meta_content_category": [category.value for category in ContentCategory]}},
        ]
    }


def build_pipeline(
    ctx: JobContext,
    known_service_ids: Optional[Collection[int]] = None,
) -> EnrichmentPipeline[Document, Document]:

    async def fetch_candidates() -> list[Document]:
        page = await ctx.client.search_documents(size=CANDIDATE_LIMIT, filters=uncategorized_filter())
        logger.info(
            f"Processing next {len(page.documents)} of uncategorized "
            f"{page.page.total_results} documents"
        )
        return page.documents

    async def enrich(document: Document) -> dict[str, Any]:
        tree = await load_document_html(document, ctx.fetcher)
        category = content_category(get_category_attribute(tree) if tree is not None else None)

        updated: dict[str, Any] = {"id": document["id"], "meta_content_category": category.value}
        if category is ContentCategory.SERVICE:
            external_id = resolve_external_service_id(tree, known_service_ids)
            if external_id is not None:
                updated["external_service_id"] = external_id

        logger.debug(f"Resolved category {category.value} for {document['id']}")
        return updated

    return EnrichmentPipeline(
        name=NAME,
        fetch_candidates=fetch_candidates,
        enrich=enrich,
        write_batch=ctx.client.update_documents,
        enrich_config=ENRICH_CONFIG,
    )


async def run(ctx: JobContext) -> PipelineReport:
    return await build_pipeline(ctx).run()
