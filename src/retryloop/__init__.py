"""Retry an operation under an attempt limit, a delay policy and a cancellation token."""

from .cancel import CancelToken, background
from .errors import (
    Cancelled,
    DeadlineExceeded,
    FatalError,
    OperationCancelled,
    RecoverableError,
    RetryLoopError,
)
from .executor import Outcome, execute, retry_func, retry_value
from .policy import DelayFunc, RetryPolicy, RetryPredicate
from .predicates import on_error, on_exceptions, on_recoverable

__all__ = [
    "CancelToken",
    "Cancelled",
    "DeadlineExceeded",
    "DelayFunc",
    "FatalError",
    "OperationCancelled",
    "Outcome",
    "RecoverableError",
    "RetryLoopError",
    "RetryPolicy",
    "RetryPredicate",
    "background",
    "execute",
    "on_error",
    "on_exceptions",
    "on_recoverable",
    "retry_func",
    "retry_value",
]
