from __future__ import annotations

import argparse
from collections.abc import Callable

from retryloop import CancelToken, RetryPolicy, execute, on_error, retry_func


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print transcripts of typical retryloop usage.")
    parser.add_argument(
        "--example",
        choices=sorted(EXAMPLES),
        action="append",
        help="Run only the named example (repeatable). Defaults to all of them.",
    )
    return parser.parse_args()


def value_form() -> None:
    calls = {"count": 0}

    def fetch() -> int:
        calls["count"] += 1
        if calls["count"] < 3:
            print(f"attempt {calls['count']}, failing")
            raise RuntimeError("boom")
        return calls["count"]

    policy = RetryPolicy(max_attempts=10, retry_on=on_error)
    outcome = execute(fetch, policy=policy, cancel=CancelToken())
    print(f"val: {outcome.value}, error: {outcome.error}")


def adjusted_policy() -> None:
    calls = {"count": 0}

    def job() -> None:
        calls["count"] += 1
        if calls["count"] < 3:
            print(f"attempt {calls['count']}, failing")
            raise RuntimeError("boom")
        print(f"attempt {calls['count']}, succeeding")

    def report(policy: RetryPolicy) -> None:
        try:
            retry_func(job, policy=policy)
        except RuntimeError as exc:
            print(f"error: {exc}")
        else:
            print("error: None")

    policy = RetryPolicy(max_attempts=2, retry_on=on_error)
    report(policy)

    calls["count"] = 0
    print()
    print("after adjustments:")
    report(policy.model_copy(update={"max_attempts": 10}))


def delay_function() -> None:
    def backoff(retry: int) -> float:
        print(f"delay_fn called with argument {retry}")
        return 0.001 * retry

    def always_failing() -> None:
        raise RuntimeError("always failing")

    policy = RetryPolicy(max_attempts=3, retry_on=on_error)
    outcome = execute(always_failing, policy=policy.with_delay_fn(backoff))
    print(f"error: {outcome.error}")


EXAMPLES: dict[str, Callable[[], None]] = {
    "value-form": value_form,
    "adjusted-policy": adjusted_policy,
    "delay-function": delay_function,
}


def main() -> int:
    args = parse_args()
    selected = args.example or list(EXAMPLES)
    for index, name in enumerate(selected):
        if index:
            print()
        print(f"== {name}")
        EXAMPLES[name]()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
