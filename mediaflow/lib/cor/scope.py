"""Cancellable execution scope carried by a pipeline context."""

import threading
import time
from typing import Callable
import weakref

from mediaflow.lib.cor.errors import OperationCancelled


class ExecutionScope:
    """Cancellation and deadline handle shared by every command of a run.

    A scope is done when it was cancelled explicitly or when its deadline has
    passed. Blocking calls made by commands should bound themselves with
    `remaining()` and check `done` (or call `raise_if_done()`) before starting
    new work.

    Args:
        deadline: Absolute deadline on the `monotonic` clock, or None for no deadline.
        parent: Optional parent scope. Cancelling the parent also cancels this scope.
        monotonic: Clock used for deadline arithmetic.
    """

    def __init__(
        self,
        deadline: float | None = None,
        parent: "ExecutionScope | None" = None,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._monotonic = monotonic
        self._parent = parent
        self._event = threading.Event()
        self._reason: str | None = None
        self._children: weakref.WeakSet[ExecutionScope] = weakref.WeakSet()

        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self._deadline = deadline

        if parent is not None:
            parent._children.add(self)
            if parent.cancelled:
                self.cancel(parent.reason or "cancelled")

    @classmethod
    def with_timeout(
        cls, seconds: float, monotonic: Callable[[], float] = time.monotonic
    ) -> "ExecutionScope":
        """Create a scope whose deadline is `seconds` from now."""
        return cls(deadline=monotonic() + seconds, monotonic=monotonic)

    def child(self, timeout: float | None = None) -> "ExecutionScope":
        """Create a scope that inherits this scope's deadline and cancellation."""
        deadline = None if timeout is None else self._monotonic() + timeout
        return ExecutionScope(deadline=deadline, parent=self, monotonic=self._monotonic)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def cancel(self, reason: str = "cancelled") -> None:
        """Cancel the scope. Subsequent calls keep the first reason."""
        if self._reason is None:
            self._reason = reason
        self._event.set()
        for child in list(self._children):
            child.cancel(reason)

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._parent is not None and self._parent.cancelled

    @property
    def deadline_exceeded(self) -> bool:
        return self._deadline is not None and self._monotonic() >= self._deadline

    @property
    def done(self) -> bool:
        return self.cancelled or self.deadline_exceeded

    @property
    def reason(self) -> str | None:
        """Why the scope is done, or None while it is still active."""
        if self._event.is_set():
            return self._reason
        if self._parent is not None and self._parent.cancelled:
            return self._parent.reason
        if self.deadline_exceeded:
            return "deadline exceeded"
        return None

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when there is no deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._monotonic())

    def raise_if_done(self) -> None:
        if self.done:
            raise OperationCancelled(self.reason or "cancelled")

    def wait(self, seconds: float) -> bool:
        """Sleep up to `seconds`, waking early if the scope is cancelled.

        The sleep is also clipped to the remaining deadline.

        Returns:
            True if the full interval elapsed, False if the scope became done.
        """
        remaining = self.remaining()
        timeout = seconds if remaining is None else min(seconds, remaining)
        if self._event.wait(timeout):
            return False
        if self._parent is not None and self._parent.cancelled:
            return False
        return not self.deadline_exceeded

    def __repr__(self) -> str:
        return f"ExecutionScope(done={self.done}, remaining={self.remaining()})"
