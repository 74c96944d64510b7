"""Rate limit detection for failures raised by downstream calls.

The classifier decides whether a failure means the caller should back off.
It is a plain predicate so callers targeting a different backend can pass
their own in place of ``is_rate_limited``.
"""

from typing import Any, Callable

RATE_LIMIT_STATUS = 429

RateLimitClassifier = Callable[[BaseException], bool]


def _status_of(obj: Any, *names: str) -> Any:
    for name in names:
        try:
            value = getattr(obj, name, None)
        except Exception:
            # Properties on foreign error types may raise
            continue
        if value is not None:
            return value
    return None


def is_rate_limited(error: BaseException) -> bool:
    """Check if an error carries an HTTP 429 status.

    Looks for ``status_code``/``statusCode`` on the error itself and on an
    attached ``response`` (httpx and requests style errors). Anything that
    does not structurally match is treated as not rate limited.

    Args:
        error: Exception raised by a task

    Returns:
        True if the error signals "Too Many Requests"
    """
    try:
        status = _status_of(error, "status_code", "statusCode")
        if status is None:
            response = _status_of(error, "response")
            if response is not None:
                status = _status_of(response, "status_code", "statusCode")
        return status == RATE_LIMIT_STATUS
    except Exception:
        return False
