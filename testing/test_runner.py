"""Tests for run_in_queue and outcome partitioning."""

import asyncio
import random

from core.task_queue import (
    QueueConfig,
    RetryExhaustedError,
    TaskOutcome,
    partition_outcomes,
    run_in_queue,
)


def _task(value: int, delay: float, fail: bool = False):
    async def run() -> int:
        await asyncio.sleep(delay)
        if fail:
            raise ValueError(f"item {value} failed")
        return value

    return run


class TestRunInQueue:

    async def test_empty_input(self):
        assert await run_in_queue([]) == []

    async def test_outcomes_are_index_aligned(self):
        rng = random.Random(7)
        tasks = [_task(i, rng.uniform(0, 0.02), fail=i % 4 == 0) for i in range(20)]

        outcomes = await run_in_queue(tasks, QueueConfig(concurrency=5, retry_count=1))

        assert len(outcomes) == 20
        for index, outcome in enumerate(outcomes):
            if index % 4 == 0:
                assert not outcome.ok
                assert isinstance(outcome.error, RetryExhaustedError)
                assert str(outcome.error.last_error) == f"item {index} failed"
            else:
                assert outcome.ok
                assert outcome.value == index

    async def test_retry_count_is_attempt_budget(self):
        calls = 0

        async def always_fails():
            nonlocal calls
            calls += 1
            raise ConnectionError("refused")

        [outcome] = await run_in_queue([always_fails], QueueConfig(retry_count=3))

        assert calls == 3
        assert outcome.error.attempts == 3

    async def test_failures_do_not_stop_other_tasks(self):
        tasks = [_task(0, 0, fail=True), _task(1, 0.01), _task(2, 0)]

        outcomes = await run_in_queue(tasks, QueueConfig(concurrency=1, retry_count=1))

        assert [o.ok for o in outcomes] == [False, True, True]


class TestPartitionOutcomes:

    def test_split_keeps_indices(self):
        error = RuntimeError("boom")
        outcomes = [
            TaskOutcome.fulfilled("a"),
            TaskOutcome.rejected(error),
            TaskOutcome.fulfilled(None),
        ]

        fulfilled, rejected = partition_outcomes(outcomes)

        assert fulfilled == [(0, "a"), (2, None)]
        assert rejected == [(1, error)]

    def test_empty(self):
        assert partition_outcomes([]) == ([], [])
