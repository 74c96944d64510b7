"""
add-external-service-id-to-services

Service pages carry their service registry id in the Drupal settings JSON
(``path.currentPath`` is ``/tpr-service/<id>``). Service documents without an
``external_service_id`` get it from their page.
"""

import logging
from typing import Any, Collection, Optional

from lxml import html

from core.scraping import get_drupal_settings, get_external_id, parse_html
from core.stores import ContentCategory, Document
from jobs.shared import EnrichmentPipeline, JobContext, PipelineReport

logger = logging.getLogger(__name__)

NAME = "add-external-service-id-to-services"

CANDIDATE_LIMIT = 1000
WRITE_BATCH_SIZE = 10


def resolve_external_service_id(
    tree: Optional[html.HtmlElement],
    known_ids: Optional[Collection[int]] = None,
) -> Optional[int]:
    """Service id declared in the page head.

    Args:
        tree: Parsed page, or None for pages without markup
        known_ids: If given, ids outside this set are discarded

    Returns:
        The id, or None if the page declares none (or an unknown one)
    """
    if tree is None:
        return None

    external_id = get_external_id(get_drupal_settings(tree, head_only=True))
    if external_id is None:
        return None

    if known_ids is not None and external_id not in known_ids:
        logger.info(f"Service id {external_id} is not a known service")
        return None
    return external_id


def build_pipeline(
    ctx: JobContext,
    known_ids: Optional[Collection[int]] = None,
) -> EnrichmentPipeline[Document, Document]:

    async def fetch_candidates() -> list[Document]:
        page = await ctx.client.search_documents(
            size=CANDIDATE_LIMIT,
            filters={"meta_content_category": ContentCategory.SERVICE.value},
        )
        missing = [doc for doc in page.documents if not doc.get("external_service_id")]
        logger.info(
            f"Found {len(missing)} without external_service_id out of "
            f"{page.page.total_results} service documents"
        )
        return missing

    async def enrich(document: Document) -> Optional[dict[str, Any]]:
        page = await ctx.fetcher.fetch(document.get("url"))
        if page is None or not page.is_html:
            return None

        external_id = resolve_external_service_id(parse_html(page.text), known_ids)
        if external_id is None:
            return None
        return {"id": document["id"], "external_service_id": external_id}

    return EnrichmentPipeline(
        name=NAME,
        fetch_candidates=fetch_candidates,
        enrich=enrich,
        write_batch=ctx.client.update_documents,
        batch_size=WRITE_BATCH_SIZE,
    )


async def run(ctx: JobContext) -> PipelineReport:
    return await build_pipeline(ctx).run()
