"""Job registry for the curation CLI.

Usage:
    from jobs.registry import get_job, available_jobs

    job = get_job("detect-breadcrumbs")
    report = await job.run(ctx)
"""

from dataclasses import dataclass
from typing import Awaitable, Callable

from jobs.enrichment import breadcrumbs, category, external_ids, languages, news_published
from jobs.purge import crawled, external_services
from jobs.shared import JobContext, PipelineReport


@dataclass(frozen=True)
class Job:
    """A named, runnable pipeline."""

    name: str
    description: str
    run: Callable[[JobContext], Awaitable[PipelineReport]]
    needs_index: bool = False


JOB_REGISTRY: dict[str, Job] = {
    job.name: job
    for job in (
        Job(category.NAME, "Add categories to uncategorized www.hel.fi documents", category.run),
        Job(languages.DETECT_NAME, "Detect language of documents without one", languages.run_detect),
        Job(languages.UPDATE_NAME, "Re-detect languages not checked today", languages.run_update),
        Job(external_ids.NAME, "Add service registry ids to service documents", external_ids.run),
        Job(breadcrumbs.NAME, "Add breadcrumbs to www.hel.fi documents", breadcrumbs.run),
        Job(news_published.NAME, "Add publish dates to news documents", news_published.run),
        Job(crawled.NAME, "Purge crawled documents that are gone or excluded", crawled.run, needs_index=True),
        Job(external_services.NAME, "Purge removed Suomi.fi service documents", external_services.run),
    )
}


def get_job(name: str) -> Job:
    """Get a registered job.

    Raises:
        ValueError: If no job has this name
    """
    if name not in JOB_REGISTRY:
        available = ", ".join(JOB_REGISTRY.keys())
        raise ValueError(f"Unknown job: {name}. Available: {available}")
    return JOB_REGISTRY[name]


def available_jobs() -> list[str]:
    """Names of all registered jobs."""
    return list(JOB_REGISTRY.keys())
