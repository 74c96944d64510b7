"""Retrying execution of a single task through a TaskQueue."""

import logging

from .errors import RetryExhaustedError
from .queue import TaskQueue
from .rate_limit import RateLimitClassifier, is_rate_limited
from .schemas import DEFAULT_RATE_LIMIT_COOLDOWN, T, Task

logger = logging.getLogger(__name__)


async def execute_with_retry(
    queue: TaskQueue,
    task: Task[T],
    attempts: int,
    classifier: RateLimitClassifier = is_rate_limited,
    cooldown: float = DEFAULT_RATE_LIMIT_COOLDOWN,
) -> T:
    """Run a task through the queue, retrying failures.

    Every attempt goes back through the queue, so retries respect the same
    concurrency and interval limits as first attempts. A rate-limited
    failure pauses the whole queue for ``cooldown`` seconds unless it is
    already paused. Other failures are retried straight away.

    The same task callable is invoked on every attempt, so it must be safe
    to run more than once.

    Args:
        queue: Queue that schedules each attempt
        task: Zero-argument callable returning an awaitable
        attempts: Total attempt budget; 0 rejects without running the task
        classifier: Predicate deciding whether an error is a rate limit signal
        cooldown: Seconds to pause the queue on a rate limit signal

    Returns:
        Value of the first successful attempt

    Raises:
        RetryExhaustedError: Every attempt failed. Chained from the last error.
    """
    errors: list[BaseException] = []

    for attempt in range(1, attempts + 1):
        try:
            return await queue.add(task)
        except Exception as e:
            errors.append(e)

            if classifier(e) and queue.pause_for(cooldown):
                logger.info(f"Rate limit exceeded, pausing queue for {cooldown:g} seconds")

            if attempt < attempts:
                logger.debug(f"Attempt {attempt}/{attempts} failed, retrying: {e}")

    last_error = errors[-1] if errors else None
    raise RetryExhaustedError(
        f"Task failed after {attempts} attempts: {last_error}",
        errors=errors,
    ) from last_error
