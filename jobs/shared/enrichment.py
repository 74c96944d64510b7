"""
Generic fetch, enrich and write-back pipeline for search documents.

Every enrichment job has the same shape:

    fetch candidates -> enrich each item in a task queue -> keep changed items
    -> chunk -> write each chunk in a task queue -> report counts

Jobs provide the three callables and the queue settings; the pipeline owns
concurrency, retries, failure attribution and reporting.

Usage:
    pipeline = EnrichmentPipeline(
        name="detect-breadcrumbs",
        fetch_candidates=fetch_documents,
        enrich=resolve_breadcrumbs,     # item -> changed item, or None
        write_batch=client.update_documents,
        enrich_config=QueueConfig(concurrency=10, retry_count=2),
    )
    report = await pipeline.run()
"""

import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Awaitable, Callable, Generic, Optional, Sequence, TypeVar

from core.task_queue import (
    QueueConfig,
    RateLimitClassifier,
    RetryExhaustedError,
    is_rate_limited,
    partition_outcomes,
    run_in_queue,
)
from core.utils import chunked

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")
ResultT = TypeVar("ResultT")

# Hard limit of the App Search documents API per request
DEFAULT_BATCH_SIZE = 100

STAGE_ENRICH = "enrich"
STAGE_WRITE = "write"

FetchCandidates = Callable[[], Awaitable[Sequence[ItemT]]]
Enrich = Callable[[ItemT], Awaitable[Optional[ResultT]]]
# Returns a BatchWrite, the number of items written, or None to count the
# whole chunk as written
WriteBatch = Callable[[list[ResultT]], Awaitable[Any]]


@dataclass
class PipelineFailure:
    """One item that could not be enriched or written."""

    item_id: str
    stage: str
    error: str


@dataclass
class BatchWrite:
    """What a write-back call did with its chunk.

    Items of the chunk counted in none of the fields are reported as
    skipped.
    """

    written: int = 0
    unchanged: int = 0
    planned: int = 0


@dataclass
class PipelineReport:
    """Outcome counts of a pipeline run."""

    name: str
    processed: int = 0
    updated: int = 0
    failed: int = 0
    unchanged: int = 0
    skipped: int = 0
    # Writes a dry run would have made
    planned: int = 0
    write_batches: int = 0
    duration_seconds: float = 0.0
    failures: list[PipelineFailure] = field(default_factory=list)

    @property
    def counted(self) -> int:
        """Items accounted for; equals ``processed`` after a run."""
        return self.updated + self.unchanged + self.failed + self.skipped + self.planned

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def default_item_id(item: Any) -> str:
    """``id`` of a dict or object, for failure attribution."""
    value = item.get("id") if isinstance(item, dict) else getattr(item, "id", None)
    return str(value) if value is not None else "<unknown>"


def describe_error(error: BaseException) -> str:
    """Message of the error that actually failed the task."""
    if isinstance(error, RetryExhaustedError) and error.last_error is not None:
        error = error.last_error
    return f"{type(error).__name__}: {error}"


class EnrichmentPipeline(Generic[ItemT, ResultT]):
    """Fetch, enrich and write back a candidate set of items.

    Args:
        name: Job name used in logs and the report
        fetch_candidates: Coroutine function returning the full candidate set
        enrich: Coroutine function mapping an item to its replacement, or
            None when the item needs no change. Must be safe to retry.
        write_batch: Coroutine function writing one chunk of changed items.
            May return a BatchWrite or the number of items written;
            otherwise the whole chunk counts as written.
        enrich_config: Queue settings for the enrichment tasks
        write_config: Queue settings for the write-back tasks
        batch_size: Maximum items per write-back call
        item_id: Identity of an item for failure attribution
        result_id: Identity of a changed item (defaults to ``item_id``)
        classifier: Rate limit predicate for both queues
    """

    def __init__(
        self,
        name: str,
        fetch_candidates: FetchCandidates[ItemT],
        enrich: Enrich[ItemT, ResultT],
        write_batch: WriteBatch[ResultT],
        enrich_config: Optional[QueueConfig] = None,
        write_config: Optional[QueueConfig] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        item_id: Callable[[ItemT], str] = default_item_id,
        result_id: Optional[Callable[[ResultT], str]] = None,
        classifier: RateLimitClassifier = is_rate_limited,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        self.name = name
        self.fetch_candidates = fetch_candidates
        self.enrich = enrich
        self.write_batch = write_batch
        self.enrich_config = enrich_config or QueueConfig()
        self.write_config = write_config or QueueConfig()
        self.batch_size = batch_size
        self.item_id = item_id
        self.result_id = result_id or item_id
        self.classifier = classifier

    async def run(self) -> PipelineReport:
        """Run the pipeline once.

        Returns:
            Counts of processed items by outcome. ``counted`` equals
            ``processed``.

        Raises:
            Exception: Whatever ``fetch_candidates`` raises (including
                PaginationDivergenceError). Nothing is written in that case.
        """
        started = time.monotonic()
        report = PipelineReport(name=self.name)

        candidates = list(await self.fetch_candidates())
        report.processed = len(candidates)

        if not candidates:
            logger.info(f"{self.name}: no candidates found")
            report.duration_seconds = time.monotonic() - started
            return report

        logger.info(f"{self.name}: enriching {len(candidates)} candidates")
        changed = await self._enrich_all(candidates, report)
        report.unchanged = report.processed - len(changed) - report.failed

        if changed:
            await self._write_all(changed, report)
        else:
            logger.info(f"{self.name}: nothing to write")

        report.duration_seconds = time.monotonic() - started
        logger.info(
            f"{self.name}: done in {report.duration_seconds:.1f}s. "
            f"processed={report.processed} updated={report.updated} "
            f"unchanged={report.unchanged} skipped={report.skipped} "
            f"planned={report.planned} failed={report.failed}"
        )
        return report

    async def _enrich_all(
        self, candidates: list[ItemT], report: PipelineReport
    ) -> list[ResultT]:
        tasks = [lambda item=item: self.enrich(item) for item in candidates]
        outcomes = await run_in_queue(tasks, self.enrich_config, classifier=self.classifier)
        fulfilled, rejected = partition_outcomes(outcomes)

        for index, error in rejected:
            item_id = self.item_id(candidates[index])
            message = describe_error(error)
            logger.error(f"{self.name}: failed to enrich {item_id}. Reason: {message}")
            report.failures.append(PipelineFailure(item_id, STAGE_ENRICH, message))
        report.failed += len(rejected)

        changed = [value for _, value in fulfilled if value is not None]
        logger.info(
            f"{self.name}: {len(fulfilled)} enriched ({len(changed)} changed), "
            f"{len(rejected)} failed"
        )
        return changed

    async def _write_all(self, changed: list[ResultT], report: PipelineReport) -> None:
        chunks = list(chunked(changed, self.batch_size))
        report.write_batches = len(chunks)
        logger.info(f"{self.name}: writing {len(changed)} items in {len(chunks)} batches")

        tasks = [lambda chunk=chunk: self.write_batch(chunk) for chunk in chunks]
        outcomes = await run_in_queue(tasks, self.write_config, classifier=self.classifier)

        for chunk, outcome in zip(chunks, outcomes):
            if outcome.ok:
                self._count_batch(chunk, outcome.value, report)
                continue

            message = describe_error(outcome.error)
            logger.error(f"{self.name}: failed to write batch of {len(chunk)}. Reason: {message}")
            report.failed += len(chunk)
            report.failures.extend(
                PipelineFailure(self.result_id(item), STAGE_WRITE, message) for item in chunk
            )

    def _count_batch(self, chunk: list[ResultT], value: Any, report: PipelineReport) -> None:
        if isinstance(value, BatchWrite):
            result = value
        elif isinstance(value, int) and not isinstance(value, bool):
            result = BatchWrite(written=value)
        else:
            result = BatchWrite(written=len(chunk))

        # Never count more than the chunk holds
        remaining = len(chunk)
        written = min(max(result.written, 0), remaining)
        remaining -= written
        unchanged = min(max(result.unchanged, 0), remaining)
        remaining -= unchanged
        planned = min(max(result.planned, 0), remaining)
        remaining -= planned

        report.updated += written
        report.unchanged += unchanged
        report.planned += planned
        if remaining:
            logger.warning(f"{self.name}: {remaining} of {len(chunk)} items in a batch were not written")
            report.skipped += remaining
