"""Async utilities for bounded network operations."""

import asyncio
import logging
from typing import Awaitable, Iterator, Optional, Sequence, TypeVar

T = TypeVar('T')

logger = logging.getLogger(__name__)


async def with_timeout(
    awaitable: Awaitable[T],
    seconds: float,
    label: str = "operation",
) -> Optional[T]:
    """Race an awaitable against a timer.

    Resolves to None when the timer wins; the awaitable is cancelled. Errors
    raised by the awaitable itself propagate.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError:
        logger.debug(f"{label} timed out after {seconds:g}s")
        return None


def chunked(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Split a sequence into consecutive lists of at most ``size`` items."""
    if size < 1:
        raise ValueError(f"Chunk size must be positive, got {size}")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])
