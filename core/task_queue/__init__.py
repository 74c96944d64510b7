"""
Task queue for driving many failure-prone network operations.

Provides:
- Bounded concurrency and rolling-window start rate limits
- Queue-wide pause on rate limit (HTTP 429) failures
- Per-task retries with an attempt budget
- Index-aligned fulfilled/rejected outcomes for a batch of tasks

Usage:
    from core.task_queue import QueueConfig, run_in_queue

    outcomes = await run_in_queue(
        [lambda doc=doc: enrich(doc) for doc in documents],
        QueueConfig(concurrency=10, retry_count=2, interval_cap=10, interval=1.0),
    )
"""

from .errors import RetryExhaustedError, TaskQueueError
from .queue import TaskQueue
from .rate_limit import RATE_LIMIT_STATUS, RateLimitClassifier, is_rate_limited
from .retry import execute_with_retry
from .runner import partition_outcomes, run_in_queue
from .schemas import OutcomeStatus, QueueConfig, Task, TaskOutcome

__all__ = [
    # Queue
    "TaskQueue",
    "QueueConfig",
    "Task",
    "TaskOutcome",
    "OutcomeStatus",
    # Execution
    "run_in_queue",
    "execute_with_retry",
    "partition_outcomes",
    # Rate limiting
    "RATE_LIMIT_STATUS",
    "RateLimitClassifier",
    "is_rate_limited",
    # Errors
    "TaskQueueError",
    "RetryExhaustedError",
]
