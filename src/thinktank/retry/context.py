"""
Cancellation context for a processing session.

A ProcessContext carries the two external signals that can end a retry
wait early: explicit cancellation and a deadline. One context may be
shared by every model's session in a review run, so cancelling it stops
all of them at their next wait.
"""

import asyncio
import time


class ProcessContext:
    """
    Explicit cancellation plus an optional deadline.

    The deadline is an absolute ``time.monotonic()`` value.
    """

    def __init__(self, deadline: float | None = None):
        self._cancel_event = asyncio.Event()
        self.deadline = deadline

    @classmethod
    def with_timeout(cls, seconds: float) -> "ProcessContext":
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def remaining(self) -> float | None:
        """Seconds until the deadline (may be negative), or None without one."""
        if self.deadline is None:
            return None
        return self.deadline - time.monotonic()

    def cause(self) -> BaseException | None:
        """
        Why the context is done, or None while it is still live.

        Explicit cancellation takes precedence over an expired deadline.
        """
        if self._cancel_event.is_set():
            return asyncio.CancelledError("context cancelled")
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            return TimeoutError("context deadline exceeded")
        return None

    async def wait_cancelled(self) -> None:
        """Block until ``cancel()`` is called."""
        await self._cancel_event.wait()
