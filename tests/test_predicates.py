from __future__ import annotations

import pytest

from retryloop import FatalError, RecoverableError, on_error, on_exceptions, on_recoverable
from retryloop.predicates import PREDICATES, resolve_predicate


def test_on_error_retries_any_exception() -> None:
    assert on_error(RuntimeError()) is True
    assert on_error(None) is False


def test_on_recoverable_only_accepts_recoverable_errors() -> None:
    class Throttled(RecoverableError):
        pass

    assert on_recoverable(Throttled()) is True
    assert on_recoverable(FatalError()) is False
    assert on_recoverable(None) is False


def test_on_exceptions_matches_listed_types() -> None:
    predicate = on_exceptions(TimeoutError, ConnectionError)

    assert predicate(TimeoutError()) is True
    assert predicate(ConnectionResetError()) is True
    assert predicate(ValueError()) is False
    assert predicate(None) is False
    assert predicate.__name__ == "on_TimeoutError_or_ConnectionError"


def test_on_exceptions_requires_types() -> None:
    with pytest.raises(ValueError):
        on_exceptions()


def test_resolve_predicate_by_name() -> None:
    assert resolve_predicate("any") is on_error
    assert resolve_predicate(" Recoverable ") is on_recoverable
    assert resolve_predicate("never") is None
    assert set(PREDICATES) == {"any", "recoverable", "never"}


def test_resolve_predicate_rejects_unknown_names() -> None:
    with pytest.raises(ValueError, match="expected one of"):
        resolve_predicate("sometimes")
