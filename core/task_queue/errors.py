"""Custom exceptions for the task queue."""


class TaskQueueError(Exception):
    """Base task queue exception."""

    pass


class RetryExhaustedError(TaskQueueError):
    """A task failed on every attempt of its retry budget.

    The last underlying error is chained as ``__cause__``; every attempt's
    error is kept in ``errors`` in the order they happened.
    """

    def __init__(self, message: str, errors: list[BaseException] | None = None):
        self.message = message
        self.errors = list(errors or [])
        super().__init__(message)

    @property
    def attempts(self) -> int:
        """Number of attempts that failed."""
        return len(self.errors)

    @property
    def last_error(self) -> BaseException | None:
        """Error raised by the final attempt, if any attempt ran."""
        return self.errors[-1] if self.errors else None
