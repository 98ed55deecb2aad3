"""Cancellation tokens observed by the retry executor."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from .errors import Cancelled, DeadlineExceeded, OperationCancelled

Clock = Callable[[], float]


class CancelToken:
    """Externally owned, monitor-only cancellation signal.

    A token becomes done at most once, either through :meth:`cancel` or when
    its monotonic ``deadline`` passes, and then stays done. Child tokens
    follow their parent but can be cancelled on their own.
    """

    def __init__(
        self,
        *,
        deadline: float | None = None,
        parent: CancelToken | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._error: OperationCancelled | None = None
        self._children: list[CancelToken] = []
        self._parent: CancelToken | None = None
        self._clock = clock
        self.deadline = deadline
        if parent is not None:
            if parent.deadline is not None and (deadline is None or parent.deadline < deadline):
                self.deadline = parent.deadline
            self._parent = parent
            parent._adopt(self)

    @classmethod
    def with_timeout(cls, seconds: float, *, clock: Clock = time.monotonic) -> CancelToken:
        return cls(deadline=clock() + max(0.0, seconds), clock=clock)

    def child(self, timeout: float | None = None) -> CancelToken:
        deadline = None if timeout is None else self._clock() + max(0.0, timeout)
        return CancelToken(deadline=deadline, parent=self, clock=self._clock)

    def cancel(self, error: OperationCancelled | None = None) -> None:
        with self._lock:
            if self._error is not None:
                return
            self._error = error or Cancelled()
            children = list(self._children)
            self._children.clear()
            self._event.set()
        for child in children:
            child.cancel(self._error)
        parent, self._parent = self._parent, None
        if parent is not None:
            parent._detach(self)

    @property
    def done(self) -> bool:
        self._check_deadline()
        return self._event.is_set()

    @property
    def error(self) -> OperationCancelled | None:
        self._check_deadline()
        return self._error

    def wait(self, timeout: float | None = None) -> bool:
        """Block up to ``timeout`` seconds; return True if the token is done."""
        if self.done:
            return True
        if self.deadline is not None:
            remaining = self.deadline - self._clock()
            if timeout is None or remaining <= timeout:
                if not self._event.wait(max(0.0, remaining)):
                    self.cancel(DeadlineExceeded())
                return True
        return self._event.wait(timeout)

    def _adopt(self, child: CancelToken) -> None:
        with self._lock:
            if self._error is None:
                self._children.append(child)
                return
            error = self._error
        child.cancel(error)

    def _detach(self, child: CancelToken) -> None:
        with self._lock:
            if child in self._children:
                self._children.remove(child)

    def _check_deadline(self) -> None:
        if self._error is None and self.deadline is not None and self._clock() >= self.deadline:
            self.cancel(DeadlineExceeded())

    def __repr__(self) -> str:
        state = type(self._error).__name__ if self._error is not None else "active"
        return f"CancelToken({state}, deadline={self.deadline!r})"


def background() -> CancelToken:
    """A token that is never cancelled."""
    return CancelToken()
