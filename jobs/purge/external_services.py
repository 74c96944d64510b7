"""
purge-external-service-documents

External documents pointing to suomi.fi services are deleted once the
service page answers 404.
"""

import logging
from typing import Optional

from core.stores import ContentCategory, Document
from core.task_queue import QueueConfig
from jobs.shared import BatchWrite, EnrichmentPipeline, JobContext, PipelineReport

logger = logging.getLogger(__name__)

NAME = "purge-external-service-documents"

SUOMIFI_PREFIX = "https://www.suomi.fi/"
DELETE_BATCH_SIZE = 10

HEAD_CHECK_CONFIG = QueueConfig(concurrency=50, retry_count=2)


def is_suomifi_service(document: Document) -> bool:
    url = document.get("external_url")
    return isinstance(url, str) and url.startswith(SUOMIFI_PREFIX)


def build_pipeline(ctx: JobContext) -> EnrichmentPipeline[Document, Document]:

    async def fetch_candidates() -> list[Document]:
        documents = await ctx.client.get_paginated_documents(
            filters={"all": [{"meta_content_category": [ContentCategory.EXTERNAL.value]}]},
        )
        services = [document for document in documents if is_suomifi_service(document)]
        logger.info(f"Checking {len(services)} Suomi.fi services of {len(documents)} external documents")
        return services

    async def check(document: Document) -> Optional[Document]:
        status = await ctx.fetcher.head_status(document["external_url"])
        if status != 404:
            return None
        logger.info(f"Found non-existent Suomi.fi service {document['id']} - {document['external_url']}")
        return document

    async def delete_batch(documents: list[Document]) -> BatchWrite:
        ids = [document["id"] for document in documents]
        if ctx.dry_run:
            logger.info(f"Would have deleted {len(ids)} documents: {', '.join(ids)}")
            return BatchWrite(planned=len(ids))

        results = await ctx.client.delete_documents(ids)
        deleted = sum(1 for result in results if result.deleted)
        logger.info(f"Deleted {deleted} documents")
        return BatchWrite(written=deleted)

    return EnrichmentPipeline(
        name=NAME,
        fetch_candidates=fetch_candidates,
        enrich=check,
        write_batch=delete_batch,
        enrich_config=HEAD_CHECK_CONFIG,
        batch_size=DELETE_BATCH_SIZE,
    )


async def run(ctx: JobContext) -> PipelineReport:
    return await build_pipeline(ctx).run()
