"""TOML settings for the command-line runner."""

from __future__ import annotations

import os
import sys
from contextlib import suppress
from pathlib import Path
from typing import Literal, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing_extensions import TypedDict

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib

from .errors import ExitCode, RetryLoopError
from .policy import RetryPolicy
from .predicates import PREDICATES, resolve_predicate

DEFAULT_CONFIG_PATH = Path("~/.config/retryloop/config.toml").expanduser()
DEFAULT_MAX_ATTEMPTS = 3
MAX_ATTEMPTS_LIMIT = 100
MAX_ATTEMPTS_ENV = "RETRYLOOP_MAX_ATTEMPTS"

RetryOnName = Literal["any", "recoverable", "never"]


class RetryTable(TypedDict, total=False):
    max_attempts: int
    delay_seconds: float
    retry_on: str
    timeout_seconds: float


class RetrySettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    max_attempts: int = Field(default=DEFAULT_MAX_ATTEMPTS, ge=1, le=MAX_ATTEMPTS_LIMIT)
    delay_seconds: float = Field(default=0.0, ge=0.0)
    retry_on: RetryOnName = "any"
    timeout_seconds: float = Field(default=0.0, ge=0.0)

    @field_validator("retry_on")
    @classmethod
    def _validate_retry_on(cls, value: str) -> str:
        if value not in PREDICATES:
            raise ValueError(f"Invalid retry predicate: {value}")
        return value

    def to_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            retry_on=resolve_predicate(self.retry_on),
            delay_seconds=self.delay_seconds,
        )

    def to_table(self) -> RetryTable:
        return RetryTable(
            max_attempts=self.max_attempts,
            delay_seconds=self.delay_seconds,
            retry_on=self.retry_on,
            timeout_seconds=self.timeout_seconds,
        )


def get_config_path(path: str | Path | None = None) -> Path:
    if path is None:
        return DEFAULT_CONFIG_PATH
    return Path(path).expanduser()


def _as_seconds(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value < 0:
        return None
    return float(value)


def _sanitize(raw: dict[str, object]) -> RetrySettings:
    settings = RetrySettings()

    table = raw.get("retry")
    if isinstance(table, dict):
        raw = {**raw, **table}

    max_attempts = raw.get("max_attempts", settings.max_attempts)
    if (
        isinstance(max_attempts, int)
        and not isinstance(max_attempts, bool)
        and 1 <= max_attempts <= MAX_ATTEMPTS_LIMIT
    ):
        settings.max_attempts = max_attempts

    delay_seconds = _as_seconds(raw.get("delay_seconds"))
    if delay_seconds is not None:
        settings.delay_seconds = delay_seconds

    retry_on = raw.get("retry_on", settings.retry_on)
    if isinstance(retry_on, str) and retry_on.strip().lower() in PREDICATES:
        settings.retry_on = cast(RetryOnName, retry_on.strip().lower())

    timeout_seconds = _as_seconds(raw.get("timeout_seconds"))
    if timeout_seconds is not None:
        settings.timeout_seconds = timeout_seconds

    return settings


def _apply_env(settings: RetrySettings) -> RetrySettings:
    env_value = os.getenv(MAX_ATTEMPTS_ENV, "").strip()
    if not env_value:
        return settings
    try:
        max_attempts = int(env_value)
    except ValueError:
        return settings
    if 1 <= max_attempts <= MAX_ATTEMPTS_LIMIT:
        settings.max_attempts = max_attempts
    return settings


def load_settings(path: str | Path | None = None, *, strict: bool = False) -> RetrySettings:
    """Read settings, falling back to defaults for a missing or broken file.

    With ``strict`` a missing, unreadable or malformed file raises
    ``RetryLoopError`` with ``ExitCode.CONFIG_ERROR`` instead.
    """
    resolved = get_config_path(path)
    if not resolved.exists():
        if strict:
            raise RetryLoopError(
                f"Config file not found: {resolved}",
                code=ExitCode.CONFIG_ERROR,
                hint="Check the --config path.",
            )
        return _apply_env(RetrySettings())
    try:
        with resolved.open("rb") as handle:
            raw = tomllib.load(handle)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        if strict:
            raise RetryLoopError(
                f"Cannot read config file {resolved}: {exc}",
                code=ExitCode.CONFIG_ERROR,
                hint="Fix the TOML syntax or file permissions.",
            ) from exc
        return _apply_env(RetrySettings())
    return _apply_env(_sanitize(raw))


def _toml_scalar(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    raise TypeError(f"Unsupported TOML scalar type: {type(value)!r}")


def save_settings(settings: RetrySettings, path: str | Path | None = None) -> Path:
    resolved = get_config_path(path)
    resolved.parent.mkdir(parents=True, exist_ok=True)
    lines = ["[retry]"]
    for key, value in settings.to_table().items():
        lines.append(f"{key} = {_toml_scalar(value)}")
    resolved.write_text("\n".join(lines) + "\n", encoding="utf-8")
    with suppress(OSError):
        resolved.chmod(0o600)
    return resolved
