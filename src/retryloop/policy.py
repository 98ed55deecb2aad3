"""Retry policy configuration."""

from __future__ import annotations

import threading
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field

RetryPredicate = Callable[[BaseException | None], bool]
DelayFunc = Callable[[int], float]


class RetryPolicy(BaseModel):
    """Immutable description of how an operation is retried.

    Attributes:
        max_attempts: Total number of operation calls allowed. Values below 1
            disable retries; the operation then runs exactly once.
        retry_on: Predicate called with the error of every attempt (``None``
            on success). ``True`` means "try again". When unset, retries are
            disabled.
        delay_seconds: Fixed pause before every attempt after the first.
        delay_fn: Per-retry delay hook, set through :meth:`with_delay_fn`.
            Receives the 1-based retry number and returns seconds; it takes
            precedence over ``delay_seconds``.

    Example:
        >>> policy = RetryPolicy(max_attempts=5, retry_on=on_error, delay_seconds=0.2)
        >>> backoff = policy.with_delay_fn(lambda n: 0.1 * 2 ** n)
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True, extra="forbid")

    max_attempts: int = 1
    retry_on: RetryPredicate | None = Field(default=None, repr=False)
    delay_seconds: float = Field(default=0.0, ge=0.0)
    delay_fn: DelayFunc | None = Field(default=None, repr=False)

    def with_delay_fn(self, fn: DelayFunc | None) -> RetryPolicy:
        """Return a copy of the policy that computes waits with ``fn``.

        The receiver is left untouched, so a shared base policy can be
        specialised per call site.
        """
        return self.model_copy(update={"delay_fn": fn})

    @property
    def retries_enabled(self) -> bool:
        return self.retry_on is not None and self.max_attempts >= 1

    @property
    def has_delay(self) -> bool:
        return self.delay_fn is not None or self.delay_seconds > 0

    def delay_for(self, retry: int) -> float:
        """Seconds to wait before the given 1-based retry.

        Negative results become 0 and anything longer than the platform wait
        limit (including infinity) is capped at ``threading.TIMEOUT_MAX``.
        """
        delay = self.delay_seconds
        if self.delay_fn is not None:
            delay = max(0.0, float(self.delay_fn(retry)))
        return min(delay, threading.TIMEOUT_MAX)
