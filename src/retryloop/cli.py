"""Command-line runner: re-run a command until it succeeds."""

from __future__ import annotations

import argparse
import logging as py_logging
import subprocess
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

from .cancel import CancelToken
from .config import MAX_ATTEMPTS_LIMIT, RetrySettings, load_settings
from .errors import (
    DeadlineExceeded,
    ExitCode,
    OperationCancelled,
    RecoverableError,
    RetryLoopError,
    user_facing_error,
)
from .executor import execute
from .logging import configure_logging, default_log_path
from .policy import RetryPolicy
from .predicates import PREDICATES

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")

CommandRunner = Callable[[list[str]], int]


class CommandFailed(RecoverableError):
    def __init__(self, argv: Sequence[str], returncode: int) -> None:
        super().__init__(f"{argv[0]} exited with status {returncode}")
        self.returncode = returncode


def _max_attempts_type(value: str) -> int:
    try:
        attempts = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("--max-attempts must be an integer") from exc
    if attempts < 1 or attempts > MAX_ATTEMPTS_LIMIT:
        raise argparse.ArgumentTypeError(f"--max-attempts must be between 1 and {MAX_ATTEMPTS_LIMIT}")
    return attempts


def _seconds_type(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid duration: {value!r}") from exc
    if seconds < 0:
        raise argparse.ArgumentTypeError("durations cannot be negative")
    return seconds


def _log_level_type(value: str) -> str:
    normalized = value.upper()
    if normalized == "WARNING":
        normalized = "WARN"
    if normalized not in _VALID_LOG_LEVELS:
        accepted = ", ".join(_VALID_LOG_LEVELS)
        raise argparse.ArgumentTypeError(f"--log-level must be one of: {accepted}")
    return normalized


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="retryloop",
        description="Run a command, retrying it while it exits with a non-zero status.",
    )
    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument("--max-attempts", type=_max_attempts_type, default=None)
    parser.add_argument("--delay", type=_seconds_type, default=None, help="Seconds between attempts")
    parser.add_argument("--retry-on", choices=tuple(PREDICATES), default=None)
    parser.add_argument(
        "--timeout",
        type=_seconds_type,
        default=None,
        help="Overall deadline in seconds; pending retries are abandoned once it passes",
    )
    parser.add_argument("--log-level", type=_log_level_type, default="WARN")
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help=f"DEBUG log destination (default: {default_log_path()})",
    )
    parser.add_argument("command", nargs=argparse.REMAINDER)
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    return parser.parse_args(argv)


def resolve_settings(namespace: argparse.Namespace) -> RetrySettings:
    settings = load_settings(namespace.config, strict=namespace.config is not None)
    if namespace.max_attempts is not None:
        settings.max_attempts = namespace.max_attempts
    if namespace.delay is not None:
        settings.delay_seconds = namespace.delay
    if namespace.retry_on is not None:
        settings.retry_on = namespace.retry_on
    if namespace.timeout is not None:
        settings.timeout_seconds = namespace.timeout
    return settings


def _command_argv(namespace: argparse.Namespace) -> list[str]:
    command = list(namespace.command)
    if command and command[0] == "--":
        command = command[1:]
    if not command:
        raise RetryLoopError(
            "No command given.",
            code=ExitCode.INVALID_ARGS,
            hint="Pass the command after '--', e.g. retryloop -- curl -f URL",
        )
    return command


def default_runner(argv: list[str]) -> int:
    try:
        completed = subprocess.run(argv, check=False)
    except FileNotFoundError as exc:
        raise RetryLoopError(
            f"Command not found: {argv[0]}",
            code=ExitCode.COMMAND_NOT_FOUND,
            hint="Check the executable name and PATH.",
        ) from exc
    return completed.returncode


def command_policy(settings: RetrySettings) -> RetryPolicy:
    """Policy for a command run; launcher failures such as a missing binary never retry."""
    policy = settings.to_policy()
    retry_on = policy.retry_on
    if retry_on is None:
        return policy

    def retryable(error: BaseException | None) -> bool:
        return not isinstance(error, RetryLoopError) and retry_on(error)

    return policy.model_copy(update={"retry_on": retryable})


def run_command(
    argv: list[str],
    settings: RetrySettings,
    *,
    runner: CommandRunner = default_runner,
    cancel: CancelToken | None = None,
) -> int:
    logger = py_logging.getLogger(__name__)
    attempts = {"count": 0}

    def operation() -> int:
        attempts["count"] += 1
        logger.info("Attempt %s/%s: %s", attempts["count"], settings.max_attempts, argv[0])
        returncode = runner(argv)
        if returncode != 0:
            raise CommandFailed(argv, returncode)
        return returncode

    if cancel is None and settings.timeout_seconds > 0:
        cancel = CancelToken.with_timeout(settings.timeout_seconds)
    outcome = execute(operation, policy=command_policy(settings), cancel=cancel)
    if outcome.ok:
        return int(ExitCode.SUCCESS)

    error = outcome.error
    if isinstance(error, CommandFailed):
        logger.warning("Giving up after %s attempt(s): %s", attempts["count"], error)
        return error.returncode
    if isinstance(error, OperationCancelled):
        code = ExitCode.DEADLINE_EXCEEDED if isinstance(error, DeadlineExceeded) else ExitCode.CANCELLED
        raise RetryLoopError(
            f"Stopped after {attempts['count']} attempt(s): {error}",
            code=code,
        )
    raise error


def main(
    argv: Sequence[str] | None = None,
    *,
    runner: CommandRunner = default_runner,
) -> int:
    log_path = default_log_path()
    logger = configure_logging(level="WARN")
    parser = build_parser()
    try:
        namespace = parser.parse_args(argv)
    except SystemExit as exc:
        if exc.code not in (None, 0):
            logger.warning("Argument parsing failed with exit code %s", exc.code)
        return int(exc.code or 0)

    if namespace.log_file is not None:
        log_path = namespace.log_file.expanduser()
    logger = configure_logging(level=namespace.log_level, log_file=log_path)

    try:
        command = _command_argv(namespace)
        settings = resolve_settings(namespace)
        logger.debug("Resolved settings: %s", settings.model_dump())
        return run_command(command, settings, runner=runner)
    except RetryLoopError as exc:
        logger.error(
            "Handled RetryLoopError (code=%s): %s",
            int(exc.code),
            exc.message,
            exc_info=namespace.log_level == "DEBUG",
        )
        print(user_facing_error(exc.message, hint=exc.hint), file=sys.stderr)
        return int(exc.code)
    except Exception:
        logger.exception("Unhandled exception in CLI entrypoint")
        hint = f"Inspect logs: {log_path}"
        print(user_facing_error("Unexpected runtime failure", hint=hint), file=sys.stderr)
        return int(ExitCode.RUNTIME_ERROR)


def run(argv: Sequence[str] | None = None) -> int:
    return main(argv)
