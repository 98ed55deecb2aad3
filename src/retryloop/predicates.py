"""Ready-made ``retry_on`` predicates."""

from __future__ import annotations

from .errors import RecoverableError
from .policy import RetryPredicate


def on_error(error: BaseException | None) -> bool:
    return error is not None


def on_recoverable(error: BaseException | None) -> bool:
    return isinstance(error, RecoverableError)


def on_exceptions(*types: type[BaseException]) -> RetryPredicate:
    """Retry when the attempt failed with one of ``types``."""
    if not types:
        raise ValueError("on_exceptions() needs at least one exception type")
    accepted = tuple(types)

    def predicate(error: BaseException | None) -> bool:
        return isinstance(error, accepted)

    predicate.__name__ = "on_" + "_or_".join(item.__name__ for item in accepted)
    return predicate


PREDICATES: dict[str, RetryPredicate | None] = {
    "any": on_error,
    "recoverable": on_recoverable,
    "never": None,
}


def resolve_predicate(name: str) -> RetryPredicate | None:
    try:
        return PREDICATES[name.strip().lower()]
    except KeyError:
        accepted = ", ".join(PREDICATES)
        raise ValueError(f"Unknown retry predicate {name!r}; expected one of: {accepted}") from None
