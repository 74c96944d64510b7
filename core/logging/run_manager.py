"""Run tracking for per-module log rotation.

A run is one job execution (or one test module). The first record written to
a log file within a run rotates that file, so ``stores.log`` always holds the
current run and ``stores.previous.log`` the one before.

Usage:
    from core.logging import logging_run

    with logging_run("detect-breadcrumbs"):
        await job.run(ctx)
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

# Context-local so concurrent event loops (xdist workers, nested asyncio.run)
# keep separate rotation state
_run_id: ContextVar[str | None] = ContextVar("curator_run_id", default=None)
_rotated: ContextVar[set[str] | None] = ContextVar("curator_rotated_logs", default=None)

# Module name -> log name, filled lazily
_module_log_cache: dict[str, str] = {}

# Package prefix -> log file name. The most specific prefix wins; anything
# unmapped goes to misc.log.
MODULE_TO_LOG = {
    "jobs.enrichment": "enrichment",
    "jobs.purge": "purge",
    "jobs.shared": "jobs-shared",
    "jobs.cli": "jobs-cli",
    "core.stores": "stores",
    "core.task_queue": "task-queue",
    "core.scraping": "scraping",
    "core.utils": "utils",
    "core.config": "config",
    "core.logging": "logging-internal",
    "testing": "testing",
}

FALLBACK_LOG = "misc"


def start_run(run_id: str) -> None:
    """Begin a run; every log rotates on its next record.

    Calling again starts a new run even if the previous one never ended.
    """
    _run_id.set(run_id)
    _rotated.set(set())


def end_run() -> None:
    """Leave the current run. Records after this never rotate."""
    _run_id.set(None)
    _rotated.set(None)


def get_current_run_id() -> str | None:
    return _run_id.get()


@contextmanager
def logging_run(run_id: str) -> Iterator[str]:
    """Scope a run to a ``with`` block."""
    start_run(run_id)
    try:
        yield run_id
    finally:
        end_run()


def should_rotate(log_name: str) -> bool:
    """Claim the rotation of a log for the current run.

    Returns True exactly once per log name per run, and always False
    outside a run.
    """
    rotated = _rotated.get()
    if _run_id.get() is None or rotated is None or log_name in rotated:
        return False
    rotated.add(log_name)
    return True


def module_to_log_name(module_name: str) -> str:
    """Log file name (without ``.log``) for a logger name."""
    log_name = _module_log_cache.get(module_name)
    if log_name is None:
        log_name = _module_log_cache[module_name] = _compute_log_name(module_name)
    return log_name


def _compute_log_name(module_name: str) -> str:
    # Walk from the full dotted name up to its top-level package so that
    # ``core.storesx`` never matches ``core.stores``
    parts = module_name.split(".")
    for end in range(len(parts), 0, -1):
        log_name = MODULE_TO_LOG.get(".".join(parts[:end]))
        if log_name is not None:
            return log_name
    return FALLBACK_LOG
