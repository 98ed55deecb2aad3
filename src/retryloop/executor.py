"""Retry control loop."""

from __future__ import annotations

import logging as py_logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from .cancel import CancelToken
from .errors import Cancelled
from .policy import RetryPolicy

T = TypeVar("T")

logger = py_logging.getLogger(__name__)


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of the last attempt, or of the cancellation that ended the run."""

    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T | None:
        if self.error is not None:
            raise self.error
        return self.value


def _attempt(operation: Callable[[], T]) -> Outcome[T]:
    try:
        return Outcome(value=operation())
    except Exception as exc:
        return Outcome(error=exc)


def _interrupted(cancel: CancelToken, policy: RetryPolicy, retry: int) -> bool:
    if not policy.has_delay:
        return cancel.done
    delay = policy.delay_for(retry)
    logger.debug("Waiting %.3fs before retry %s", delay, retry)
    return cancel.wait(delay)


def execute(
    operation: Callable[[], T],
    *,
    policy: RetryPolicy,
    cancel: CancelToken | None = None,
) -> Outcome[T]:
    """Run ``operation`` under ``policy`` and return the final outcome.

    The first call always happens. Before each later call the executor waits
    according to the policy while watching ``cancel``; if the token fires
    first the run stops and the token's error becomes the final error, while
    the value of the last call that ran is kept. Operation errors are never
    wrapped: exhausting the attempts returns the last error unchanged.
    """
    if not policy.retries_enabled:
        return _attempt(operation)

    retry_on = policy.retry_on
    token = cancel if cancel is not None else CancelToken()
    outcome: Outcome[T] = Outcome()
    for index in range(policy.max_attempts):
        if index > 0 and _interrupted(token, policy, index):
            error = token.error or Cancelled()
            logger.debug("Retry loop stopped before attempt %s: %s", index + 1, error)
            return Outcome(value=outcome.value, error=error)
        outcome = _attempt(operation)
        if not retry_on(outcome.error):
            break
        logger.debug(
            "Attempt %s/%s is retryable: %r", index + 1, policy.max_attempts, outcome.error
        )
    return outcome


def retry_value(
    operation: Callable[[], T],
    *,
    policy: RetryPolicy,
    cancel: CancelToken | None = None,
) -> T | None:
    """Return the value of the final attempt or raise its error."""
    return execute(operation, policy=policy, cancel=cancel).unwrap()


def retry_func(
    operation: Callable[[], object],
    *,
    policy: RetryPolicy,
    cancel: CancelToken | None = None,
) -> None:
    """Retry an operation whose return value is irrelevant; raise the final error."""
    outcome = execute(operation, policy=policy, cancel=cancel)
    if outcome.error is not None:
        raise outcome.error
