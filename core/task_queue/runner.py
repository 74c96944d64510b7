"""
Submit a batch of tasks to a fresh queue and collect their outcomes.

Every task gets exactly one TaskOutcome, in the same position as the task in
the input list, whatever order the tasks finished in.
"""

import asyncio
import logging
from typing import Optional, Sequence

from .queue import TaskQueue
from .rate_limit import RateLimitClassifier, is_rate_limited
from .retry import execute_with_retry
from .schemas import QueueConfig, T, Task, TaskOutcome

logger = logging.getLogger(__name__)


async def run_in_queue(
    tasks: Sequence[Task[T]],
    config: Optional[QueueConfig] = None,
    classifier: RateLimitClassifier = is_rate_limited,
    queue: Optional[TaskQueue] = None,
) -> list[TaskOutcome[T]]:
    """Run tasks with bounded concurrency and retries.

    Args:
        tasks: Zero-argument callables returning awaitables
        config: Queue settings (defaults: concurrency 5, 5 attempts)
        classifier: Rate limit predicate applied to task errors
        queue: Existing queue to schedule on; built from ``config`` if omitted

    Returns:
        One outcome per task, index-aligned with ``tasks``
    """
    config = config or QueueConfig()
    queue = queue or TaskQueue.from_config(config)

    async def settle(task: Task[T]) -> TaskOutcome[T]:
        try:
            value = await execute_with_retry(
                queue,
                task,
                attempts=config.retry_count,
                classifier=classifier,
                cooldown=config.rate_limit_cooldown,
            )
        except Exception as e:
            return TaskOutcome.rejected(e)
        return TaskOutcome.fulfilled(value)

    if not tasks:
        return []

    outcomes = await asyncio.gather(*(settle(task) for task in tasks))

    rejected = sum(1 for outcome in outcomes if not outcome.ok)
    logger.debug(f"Queue settled {len(outcomes)} tasks ({rejected} rejected)")
    return list(outcomes)


def partition_outcomes(
    outcomes: Sequence[TaskOutcome[T]],
) -> tuple[list[tuple[int, T]], list[tuple[int, BaseException]]]:
    """Split outcomes into (index, value) and (index, error) pairs."""
    fulfilled: list[tuple[int, T]] = []
    rejected: list[tuple[int, BaseException]] = []

    for index, outcome in enumerate(outcomes):
        if outcome.ok:
            fulfilled.append((index, outcome.value))
        else:
            rejected.append((index, outcome.error))

    return fulfilled, rejected
