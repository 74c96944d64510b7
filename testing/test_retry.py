"""Tests for execute_with_retry."""

import asyncio

import pytest

from core.stores import SearchApiError
from core.task_queue import RetryExhaustedError, TaskQueue, execute_with_retry


class _Flaky:
    """Task that fails a fixed number of times before succeeding."""

    def __init__(self, failures: int, error_factory=lambda n: RuntimeError(f"failure {n}")):
        self.failures = failures
        self.error_factory = error_factory
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error_factory(self.calls)
        return "ok"


class TestExecuteWithRetry:

    async def test_first_attempt_succeeds(self):
        task = _Flaky(failures=0)

        assert await execute_with_retry(TaskQueue(), task, attempts=3) == "ok"
        assert task.calls == 1

    async def test_succeeds_after_failures(self):
        task = _Flaky(failures=2)

        assert await execute_with_retry(TaskQueue(), task, attempts=3) == "ok"
        assert task.calls == 3

    async def test_exhausted_keeps_every_error(self):
        task = _Flaky(failures=10)

        with pytest.raises(RetryExhaustedError) as exc_info:
            await execute_with_retry(TaskQueue(), task, attempts=3)

        error = exc_info.value
        assert task.calls == 3
        assert error.attempts == 3
        assert [str(e) for e in error.errors] == ["failure 1", "failure 2", "failure 3"]
        assert error.last_error is error.errors[-1]
        assert error.__cause__ is error.last_error

    async def test_zero_attempts_never_runs(self):
        task = _Flaky(failures=0)

        with pytest.raises(RetryExhaustedError) as exc_info:
            await execute_with_retry(TaskQueue(), task, attempts=0)

        assert task.calls == 0
        assert exc_info.value.errors == []
        assert exc_info.value.last_error is None

    async def test_rate_limit_pauses_queue(self):
        queue = TaskQueue()
        task = _Flaky(
            failures=1,
            error_factory=lambda n: SearchApiError("Too many requests", status_code=429),
        )

        loop = asyncio.get_running_loop()
        began = loop.time()
        assert await execute_with_retry(queue, task, attempts=2, cooldown=0.05) == "ok"

        assert loop.time() - began >= 0.04
        assert not queue.is_paused

    async def test_other_errors_retry_without_pause(self):
        queue = TaskQueue()
        task = _Flaky(failures=1, error_factory=lambda n: SearchApiError("Bad gateway", status_code=502))

        loop = asyncio.get_running_loop()
        began = loop.time()
        assert await execute_with_retry(queue, task, attempts=2, cooldown=5.0) == "ok"

        assert loop.time() - began < 1.0
        assert not queue.has_pending_resume

    async def test_custom_classifier(self):
        queue = TaskQueue()
        task = _Flaky(failures=1, error_factory=lambda n: ConnectionResetError("throttled"))
        seen: list[BaseException] = []

        def classifier(error: BaseException) -> bool:
            seen.append(error)
            return True

        assert await execute_with_retry(queue, task, attempts=2, classifier=classifier, cooldown=0.01) == "ok"
        assert len(seen) == 1
        assert isinstance(seen[0], ConnectionResetError)

    async def test_concurrent_rate_limits_arm_one_timer(self):
        queue = TaskQueue(concurrency=5)
        arms = []
        original = queue.pause_for

        def tracking_pause_for(seconds: float) -> bool:
            armed = original(seconds)
            arms.append(armed)
            return armed

        queue.pause_for = tracking_pause_for

        tasks = [
            _Flaky(failures=1, error_factory=lambda n: SearchApiError("Too many requests", status_code=429))
            for _ in range(5)
        ]
        results = await asyncio.gather(
            *(execute_with_retry(queue, task, attempts=2, cooldown=0.05) for task in tasks)
        )

        assert results == ["ok"] * 5
        assert arms.count(True) == 1

    async def test_rate_limit_holds_fresh_tasks_only(self):
        queue = TaskQueue(concurrency=3)
        loop = asyncio.get_running_loop()
        running_started = asyncio.Event()
        times: dict[str, float] = {}

        async def long_running():
            running_started.set()
            await asyncio.sleep(0.1)
            times["running_done"] = loop.time()

        async def fresh():
            times["fresh_started"] = loop.time()

        began = loop.time()
        running = asyncio.create_task(queue.add(long_running))
        await running_started.wait()

        limited = _Flaky(
            failures=1,
            error_factory=lambda n: SearchApiError("Too many requests", status_code=429),
        )
        retried = asyncio.create_task(execute_with_retry(queue, limited, attempts=2, cooldown=0.3))
        while not queue.is_paused:
            await asyncio.sleep(0.001)
        paused_at = loop.time()

        await queue.add(fresh)
        await asyncio.gather(running, retried)

        assert times["running_done"] - began < 0.25
        assert times["fresh_started"] - paused_at >= 0.28
        assert limited.calls == 2
