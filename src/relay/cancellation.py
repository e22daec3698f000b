"""
Cancellation tokens for executor calls.

A CancellationToken is the caller-supplied cancellation context of one
executor call. The executor checks it at every suspension point (before and
after each planner invocation, and before each tool invocation). Tools and
planners receive it so they can cap their own timeouts with timeout_for()
and sleep with wait().

A token is owned by the caller; the same token may be shared by several
calls that should be cancelled together.
"""

import threading
import time

from relay.errors import ExecutionCancelledError


class CancellationToken:
    """
    Thread-safe cancellation flag with an optional deadline.

    Usage:
        token = CancellationToken(timeout_seconds=60)
        executor.call({"input": "..."}, cancel_token=token)

        # from another thread
        token.cancel()
    """

    def __init__(self, timeout_seconds: float | None = None) -> None:
        self._event = threading.Event()
        self._deadline: float | None = None
        if timeout_seconds is not None:
            self._deadline = time.monotonic() + timeout_seconds

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """True once cancel() was called or the deadline has passed."""
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining_seconds(self) -> float | None:
        """Seconds left before the deadline, or None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def timeout_for(self, seconds: float) -> float:
        """Cap a timeout at the time left before the deadline."""
        remaining = self.remaining_seconds()
        if remaining is None:
            return seconds
        return min(seconds, remaining)

    def wait(self, seconds: float) -> bool:
        """
        Sleep up to seconds, waking early on cancel() or at the deadline.

        Returns:
            True if the token is cancelled when the wait ends
        """
        end = time.monotonic() + seconds
        while not self.cancelled:
            left = self.timeout_for(end - time.monotonic())
            if left <= 0:
                break
            self._event.wait(left)
        return self.cancelled

    def raise_if_cancelled(self, phase: str = "") -> None:
        """
        Raise ExecutionCancelledError if cancellation was requested.

        Args:
            phase: Where the check happens, reported in the error
        """
        if self.cancelled:
            raise ExecutionCancelledError(phase=phase)

    def __repr__(self) -> str:
        return f"<CancellationToken cancelled={self.cancelled}>"
