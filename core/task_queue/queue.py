"""
Bounded-concurrency asyncio task queue.

Provides:
- Concurrency cap (at most N tasks running at once)
- Interval cap (at most M task starts within any rolling window)
- Carry-over of in-flight tasks into following interval windows
- Pause/resume with at most one pending resume timer

Usage:
    queue = TaskQueue(concurrency=10, interval_cap=10, interval=1.0)
    value = await queue.add(lambda: fetch_page(url))

Waiting callers are served in FIFO order. Scheduling state is only touched
from the event loop thread between awaits, so no lock is needed.
"""

import asyncio
import logging
from collections import deque
from typing import Optional

from .schemas import QueueConfig, T, Task

logger = logging.getLogger(__name__)


class _StartRecord:
    """Start time of one task, kept while it counts against the interval cap."""

    __slots__ = ("started_at", "done")

    def __init__(self, started_at: float):
        self.started_at = started_at
        self.done = False


class TaskQueue:
    """Run awaitables with concurrency and start-rate limits.

    While paused, no new task starts. Tasks already running are not touched.
    """

    def __init__(
        self,
        concurrency: int = 5,
        interval_cap: Optional[int] = None,
        interval: Optional[float] = None,
        carryover_concurrency: bool = False,
    ):
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        if (interval_cap is None) != (interval is None):
            raise ValueError("interval_cap and interval must be set together")
        if interval_cap is not None and interval_cap < 1:
            raise ValueError(f"interval_cap must be >= 1, got {interval_cap}")
        if interval is not None and interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")

        self.concurrency = concurrency
        self.interval_cap = interval_cap
        self.interval = interval
        self.carryover_concurrency = carryover_concurrency

        self._active = 0
        self._paused = False
        self._waiters: deque[asyncio.Future] = deque()
        self._starts: deque[_StartRecord] = deque()
        self._dispatch_handle: Optional[asyncio.TimerHandle] = None
        self._resume_handle: Optional[asyncio.TimerHandle] = None

    @classmethod
    def from_config(cls, config: QueueConfig) -> "TaskQueue":
        """Build a queue from QueueConfig settings."""
        return cls(
            concurrency=config.concurrency,
            interval_cap=config.interval_cap,
            interval=config.interval,
            carryover_concurrency=config.carryover_concurrency,
        )

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def active_count(self) -> int:
        """Number of tasks currently running."""
        return self._active

    @property
    def pending_count(self) -> int:
        """Number of callers waiting for a slot."""
        return sum(1 for waiter in self._waiters if not waiter.done())

    @property
    def has_pending_resume(self) -> bool:
        return self._resume_handle is not None

    def pause(self) -> None:
        """Stop starting new tasks until resume() is called."""
        self._paused = True

    def resume(self) -> None:
        """Allow tasks to start again and drop any pending resume timer."""
        if self._resume_handle is not None:
            self._resume_handle.cancel()
            self._resume_handle = None
        if self._paused:
            self._paused = False
            logger.info("Resuming queue")
        self._dispatch()

    def pause_for(self, seconds: float) -> bool:
        """Pause the queue and schedule a resume after ``seconds``.

        A call while the queue is already paused is a no-op: the existing
        resume timer is kept and no second one is armed.

        Args:
            seconds: Cooldown before the queue resumes

        Returns:
            True if this call paused the queue, False if it was already paused
        """
        if self._paused:
            return False

        self.pause()
        loop = asyncio.get_running_loop()
        self._resume_handle = loop.call_later(seconds, self.resume)
        return True

    async def add(self, task: Task[T]) -> T:
        """Wait for a slot, run the task and return its result.

        The task's own exception propagates to the caller unchanged.

        Args:
            task: Zero-argument callable returning an awaitable

        Returns:
            Value produced by the task
        """
        loop = asyncio.get_running_loop()
        waiter = loop.create_future()
        self._waiters.append(waiter)
        self._dispatch()

        try:
            record = await waiter
        except asyncio.CancelledError:
            # Slot may have been granted just before cancellation
            if waiter.done() and not waiter.cancelled():
                self._release(waiter.result())
            raise

        try:
            return await task()
        finally:
            self._release(record)

    def _release(self, record: Optional[_StartRecord]) -> None:
        self._active -= 1
        if record is not None:
            record.done = True
        self._dispatch()

    def _dispatch(self) -> None:
        """Start as many waiting callers as the limits allow."""
        if self._dispatch_handle is not None:
            self._dispatch_handle.cancel()
            self._dispatch_handle = None

        loop = asyncio.get_running_loop()

        while self._waiters and not self._paused and self._active < self.concurrency:
            waiter = self._waiters[0]
            if waiter.done():
                # Caller was cancelled while waiting
                self._waiters.popleft()
                continue

            now = loop.time()
            delay = self._interval_delay(now)
            if delay is None:
                # Blocked by carried-over tasks; _release() dispatches again
                break
            if delay > 0:
                self._dispatch_handle = loop.call_later(delay, self._dispatch)
                break

            self._waiters.popleft()
            self._active += 1
            waiter.set_result(self._record_start(now))

    def _record_start(self, now: float) -> Optional[_StartRecord]:
        if self.interval_cap is None:
            return None
        record = _StartRecord(now)
        self._starts.append(record)
        return record

    def _counts(self, record: _StartRecord, cutoff: float) -> bool:
        if record.started_at > cutoff:
            return True
        return self.carryover_concurrency and not record.done

    def _interval_delay(self, now: float) -> Optional[float]:
        """Seconds until another task may start under the interval cap.

        Returns:
            0.0 if a task may start now, a positive delay if a start record
            leaves the window later, or None if only carried-over running
            tasks hold the window
        """
        if self.interval_cap is None:
            return 0.0

        cutoff = now - self.interval
        while self._starts and not self._counts(self._starts[0], cutoff):
            self._starts.popleft()

        counted = [r for r in self._starts if self._counts(r, cutoff)]
        if len(counted) < self.interval_cap:
            return 0.0

        in_window = [r.started_at for r in counted if r.started_at > cutoff]
        if not in_window:
            return None
        return min(in_window) + self.interval - now
