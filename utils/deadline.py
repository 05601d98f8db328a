"""Per-request deadline propagated through a context variable."""

import asyncio
import time
from contextvars import ContextVar
from typing import Awaitable, Optional, TypeVar

T = TypeVar("T")

# Absolute monotonic timestamp after which the current request should give up
request_deadline: ContextVar[Optional[float]] = ContextVar("request_deadline", default=None)


def set_deadline(seconds: float):
    """Set the deadline for the current context, `seconds` from now."""
    request_deadline.set(time.monotonic() + seconds)


def clear_deadline():
    """Remove the deadline from the current context."""
    request_deadline.set(None)


def remaining(default: float) -> float:
    """
    Time budget for the next I/O call.

    Returns `default` when no deadline is set, otherwise the smaller of
    `default` and the time left (never negative).
    """
    deadline = request_deadline.get()
    if deadline is None:
        return default
    return max(0.0, min(default, deadline - time.monotonic()))


async def with_timeout(awaitable: Awaitable[T], default: float) -> T:
    """
    Await `awaitable` bounded by the current deadline.

    Raises:
        asyncio.TimeoutError: If the budget runs out.
    """
    return await asyncio.wait_for(awaitable, timeout=remaining(default))
