"""Bounded waits with cooperative cancellation for storage calls."""

import threading
import time


class OperationCancelledError(Exception):
    """Raised when the caller abandoned the operation."""


class DeadlineExceededError(TimeoutError):
    """Raised when the time budget of an operation is spent."""


class Deadline:
    """A time budget shared between a request and the storage work it starts.

    The request side calls ``cancel()`` when it stops waiting (timeout or
    client disconnect). The storage side calls ``check()`` between round
    trips and stops as soon as either the budget is spent or the request
    gave up.
    """

    def __init__(self, timeout_seconds: float, clock=time.monotonic):
        self.timeout_seconds = timeout_seconds
        self._clock = clock
        self._expires_at = clock() + timeout_seconds
        self._cancelled = threading.Event()

    @property
    def remaining(self) -> float:
        """Seconds left before the deadline, never negative."""
        return max(0.0, self._expires_at - self._clock())

    @property
    def expired(self) -> bool:
        return self._clock() >= self._expires_at

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def check(self, operation: str = "storage call") -> None:
        """Raise if the work should stop.

        Raises:
            OperationCancelledError: If the request was cancelled
            DeadlineExceededError: If the time budget is spent
        """
        if self.cancelled:
            raise OperationCancelledError(f"{operation} cancelled")
        if self.expired:
            raise DeadlineExceededError(
                f"{operation} exceeded {self.timeout_seconds:g}s deadline"
            )
