"""
detect-document-languages and update-documents-languages

The first job fills in ``language`` for documents that have none of the
supported values. Documents in an unsupported language are marked
``LANGUAGE_UNDEFINED`` so they leave the candidate set.

The second re-detects the language of every document not checked today and
writes the ones whose language changed.
"""

import logging
from datetime import date
from typing import Any, Optional

from core.stores import Document
from core.task_queue import QueueConfig
from jobs.shared import (
    SUPPORTED_LANGUAGES,
    UNLOCALIZABLE_CONTENT_TYPES,
    EnrichmentPipeline,
    JobContext,
    PipelineReport,
    detect_document_language,
)

logger = logging.getLogger(__name__)

DETECT_NAME = "detect-document-languages"
UPDATE_NAME = "update-documents-languages"

# Marker for documents whose language cannot be determined
LANGUAGE_UNDEFINED = "C"

DETECT_CANDIDATE_LIMIT = 100
UPDATE_PAGE_SIZE = 1000

ENRICH_CONFIG = QueueConfig(concurrency=10, retry_count=2, interval_cap=20, interval=1.0)


def missing_language_filter() -> dict[str, Any]:
    languages = [*SUPPORTED_LANGUAGES, LANGUAGE_UNDEFINED]
    return {
        "all": [
            {"none": [{"language": language} for language in languages]},
            {"none": [{"content_type": list(UNLOCALIZABLE_CONTENT_TYPES)}]},
        ]
    }


def build_detect_pipeline(ctx: JobContext) -> EnrichmentPipeline[Document, Document]:

    async def fetch_candidates() -> list[Document]:
        page = await ctx.client.search_documents(
            size=DETECT_CANDIDATE_LIMIT, filters=missing_language_filter()
        )
        logger.info(
            f"Detecting language for {len(page.documents)} / {page.page.total_results} documents"
        )
        return page.documents

    async def enrich(document: Document) -> Optional[dict[str, Any]]:
        language = await detect_document_language(document, ctx.fetcher)
        if not language:
            logger.warning(f"Failed to detect language for {document.get('id')}")
            return None

        if language not in SUPPORTED_LANGUAGES:
            logger.warning(f"Detected unsupported language {language} for {document.get('id')}")
            language = LANGUAGE_UNDEFINED

        if language == document.get("language"):
            return None
        return {"id": document["id"], "language": language}

    return EnrichmentPipeline(
        name=DETECT_NAME,
        fetch_candidates=fetch_candidates,
        enrich=enrich,
        write_batch=ctx.client.update_documents,
        enrich_config=ENRICH_CONFIG,
    )


def build_update_pipeline(
    ctx: JobContext,
    today: Optional[date] = None,
) -> EnrichmentPipeline[Document, Document]:
    check_date = (today or date.today()).isoformat()

    async def fetch_candidates() -> list[Document]:
        documents = await ctx.client.get_paginated_documents(
            filters={"none": [{"last_language_check": check_date}]},
            sort=[{"url": "asc"}],
            page_size=UPDATE_PAGE_SIZE,
        )
        logger.info(f"Found {len(documents)} documents not checked on {check_date}")
        return documents

    async def enrich(document: Document) -> Optional[dict[str, Any]]:
        language = await detect_document_language(document, ctx.fetcher)
        if not language or language == document.get("language"):
            return None

        logger.info(f"Language of {document['id']} changed from {document.get('language')} to {language}")
        return {"id": document["id"], "language": language, "last_language_check": check_date}

    return EnrichmentPipeline(
        name=UPDATE_NAME,
        fetch_candidates=fetch_candidates,
        enrich=enrich,
        write_batch=ctx.client.update_documents,
        enrich_config=ENRICH_CONFIG,
    )


async def run_detect(ctx: JobContext) -> PipelineReport:
    return await build_detect_pipeline(ctx).run()


async def run_update(ctx: JobContext) -> PipelineReport:
    return await build_update_pipeline(ctx).run()
