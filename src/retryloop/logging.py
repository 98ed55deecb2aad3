"""Application logging helpers."""

from __future__ import annotations

import logging as py_logging
import sys
from pathlib import Path
from typing import TextIO

LOG_LEVELS = {
    "DEBUG": py_logging.DEBUG,
    "INFO": py_logging.INFO,
    "WARN": py_logging.WARNING,
    "WARNING": py_logging.WARNING,
    "ERROR": py_logging.ERROR,
}
LOGGER_NAME = "retryloop"
DEFAULT_LOG_PATH = Path("~/.config/retryloop/logs/retryloop.log")
_FALLBACK_LOG_PATH = Path(".retryloop/logs/retryloop.log")
_FORMAT = "%(asctime)s %(levelname)s %(name)s:%(lineno)d %(message)s"


def default_log_path() -> Path:
    """Per-user log file; falls back to the working directory when HOME is unknown."""
    try:
        return DEFAULT_LOG_PATH.expanduser().resolve()
    except RuntimeError:
        return (Path.cwd() / _FALLBACK_LOG_PATH).resolve()


def _resolve_level(level: str) -> int:
    normalized = level.upper()
    if normalized == "WARNING":
        normalized = "WARN"
    return LOG_LEVELS.get(normalized, py_logging.INFO)


def _open_file_handler(log_file: str | Path) -> py_logging.Handler | None:
    try:
        log_path = Path(log_file).expanduser().resolve()
    except RuntimeError:
        log_path = Path(log_file).resolve()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        return py_logging.FileHandler(log_path, encoding="utf-8")
    except OSError:
        return None


def configure_logging(
    level: str = "INFO",
    stream: TextIO | None = None,
    *,
    log_file: str | Path | None = None,
) -> py_logging.Logger:
    """Route the ``retryloop`` logger to stderr at ``level``.

    With ``log_file`` the file additionally receives every DEBUG record, so
    per-attempt executor messages end up there even when the console is quiet.
    An unwritable log file is skipped. Library code never calls this; it is
    meant for the CLI and for applications that want retry attempts logged.
    """
    resolved = _resolve_level(level)
    formatter = py_logging.Formatter(_FORMAT)

    logger = py_logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.propagate = False

    console = py_logging.StreamHandler(stream or sys.stderr)
    console.setLevel(resolved)
    console.setFormatter(formatter)
    logger.addHandler(console)

    file_handler = _open_file_handler(log_file) if log_file else None
    if file_handler is None:
        logger.setLevel(resolved)
        return logger

    file_handler.setLevel(py_logging.DEBUG)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)
    logger.setLevel(py_logging.DEBUG)
    return logger
