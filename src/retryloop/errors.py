"""Error model and exit code contract."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    INVALID_ARGS = 2
    CONFIG_ERROR = 3
    RUNTIME_ERROR = 4
    CANCELLED = 5
    DEADLINE_EXCEEDED = 6
    COMMAND_NOT_FOUND = 127


@dataclass
class RetryLoopError(Exception):
    message: str
    code: ExitCode = ExitCode.RUNTIME_ERROR
    hint: str = ""

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} Hint: {self.hint}"
        return self.message


class RecoverableError(Exception):
    """Transient failure that can be retried."""


class FatalError(Exception):
    """Non-recoverable failure that should stop immediately."""


class OperationCancelled(Exception):
    """Raised in place of an operation error when a retry wait is interrupted."""


class Cancelled(OperationCancelled):
    def __init__(self, message: str = "retry cancelled") -> None:
        super().__init__(message)


class DeadlineExceeded(OperationCancelled):
    def __init__(self, message: str = "retry deadline exceeded") -> None:
        super().__init__(message)


def user_facing_error(message: str, *, hint: str = "") -> str:
    if hint:
        return f"Error: {message}. Next step: {hint}"
    return f"Error: {message}."
