"""
Operation context - cooperative cancellation and deadlines.

Every BMC call and every polling delay checks the context first, so a
cancelled batch stops at its next HTTP round trip or backoff wait.
"""

import threading
import time
from typing import Optional

from ..errors import OperationCancelledError


class OperationContext:
    """
    Cancellation flag plus an optional absolute deadline.

    Contexts derived with with_timeout() share the parent's cancellation flag,
    so cancelling the parent cancels every child.
    """

    def __init__(self, deadline: Optional[float] = None, _event: Optional[threading.Event] = None):
        """
        Args:
            deadline: Absolute time.monotonic() value after which the context is expired
        """
        self._event = _event or threading.Event()
        self._deadline = deadline

    @classmethod
    def background(cls) -> "OperationContext":
        """Context that is never cancelled and has no deadline"""
        return cls()

    @classmethod
    def with_deadline_in(cls, seconds: Optional[float]) -> "OperationContext":
        """New root context expiring after the given number of seconds (None = no deadline)"""
        return cls().with_timeout(seconds)

    def with_timeout(self, seconds: Optional[float]) -> "OperationContext":
        """
        Derive a child context with a deadline no later than this one's.

        Args:
            seconds: Relative timeout; None keeps the current deadline
        """
        if seconds is None:
            return OperationContext(self._deadline, self._event)
        deadline = time.monotonic() + seconds
        if self._deadline is not None:
            deadline = min(deadline, self._deadline)
        return OperationContext(deadline, self._event)

    def cancel(self) -> None:
        """Cancel this context and every context derived from it"""
        self._event.set()

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def cancelled(self) -> bool:
        """True if cancel() was called or the deadline has passed"""
        return self._event.is_set() or self._expired()

    def remaining(self) -> Optional[float]:
        """Seconds until the deadline, None if there is no deadline"""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self) -> None:
        """
        Raise if the context can no longer be used.

        Raises:
            OperationCancelledError: If cancelled or past the deadline
        """
        if self._event.is_set():
            raise OperationCancelledError("Operation cancelled")
        if self._expired():
            raise OperationCancelledError("Operation deadline exceeded")

    def wait(self, seconds: float) -> None:
        """
        Sleep for up to `seconds`, waking early on cancellation.

        Raises:
            OperationCancelledError: If the context is cancelled or expires while waiting
        """
        self.check()
        if seconds <= 0:
            return

        remaining = self.remaining()
        timeout = seconds if remaining is None else min(seconds, remaining)
        self._event.wait(timeout)
        self.check()

    def _expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline


def ensure_context(ctx: Optional[OperationContext]) -> OperationContext:
    """Return ctx, or a background context when the caller passed None"""
    return ctx if ctx is not None else OperationContext.background()
