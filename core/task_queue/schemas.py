"""
Schemas for the task queue.

- QueueConfig: concurrency, interval cap and retry settings for one queue
- TaskOutcome: settled result of one submitted task after all retries
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from pydantic import BaseModel, Field, model_validator

T = TypeVar("T")

# Zero-argument callable producing the awaitable to run. Retries call it again.
Task = Callable[[], Awaitable[T]]

DEFAULT_CONCURRENCY = 5
DEFAULT_RETRY_COUNT = 5
DEFAULT_RATE_LIMIT_COOLDOWN = 2.0  # seconds


class QueueConfig(BaseModel):
    """Settings for a single TaskQueue run.

    ``interval_cap`` and ``interval`` go together: at most ``interval_cap``
    tasks may start within any rolling window of ``interval`` seconds.
    """

    concurrency: int = Field(default=DEFAULT_CONCURRENCY, ge=1)
    retry_count: int = Field(default=DEFAULT_RETRY_COUNT, ge=0)
    interval_cap: Optional[int] = Field(default=None, ge=1)
    interval: Optional[float] = Field(default=None, gt=0)
    carryover_concurrency: bool = False
    rate_limit_cooldown: float = Field(default=DEFAULT_RATE_LIMIT_COOLDOWN, ge=0)

    @model_validator(mode="after")
    def _check_interval_pair(self) -> "QueueConfig":
        if (self.interval_cap is None) != (self.interval is None):
            raise ValueError("interval_cap and interval must be set together")
        return self


class OutcomeStatus(Enum):
    """Settled state of a task."""

    FULFILLED = "fulfilled"
    REJECTED = "rejected"


@dataclass(frozen=True)
class TaskOutcome(Generic[T]):
    """Result of one task: a value when fulfilled, an error when rejected."""

    status: OutcomeStatus
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @classmethod
    def fulfilled(cls, value: T) -> "TaskOutcome[T]":
        return cls(status=OutcomeStatus.FULFILLED, value=value)

    @classmethod
    def rejected(cls, error: BaseException) -> "TaskOutcome[Any]":
        return cls(status=OutcomeStatus.REJECTED, error=error)

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.FULFILLED
