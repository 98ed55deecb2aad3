from __future__ import annotations

import threading
import time

from retryloop import CancelToken, Cancelled, DeadlineExceeded, OperationCancelled, background


class _FakeClock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_new_token_is_active() -> None:
    token = CancelToken()

    assert token.done is False
    assert token.error is None
    assert token.wait(0) is False


def test_background_token_never_cancels() -> None:
    token = background()

    assert token.wait(0.001) is False
    assert token.error is None


def test_cancel_marks_token_done_with_cancelled_error() -> None:
    token = CancelToken()

    token.cancel()

    assert token.done is True
    assert isinstance(token.error, Cancelled)
    assert token.wait(10) is True


def test_cancel_is_idempotent_and_first_error_wins() -> None:
    token = CancelToken()
    first = Cancelled("first")

    token.cancel(first)
    token.cancel(DeadlineExceeded())

    assert token.error is first


def test_deadline_expires_lazily() -> None:
    clock = _FakeClock()
    token = CancelToken.with_timeout(5, clock=clock)

    assert token.done is False
    clock.now += 5

    assert token.done is True
    assert isinstance(token.error, DeadlineExceeded)


def test_wait_returns_true_when_deadline_is_shorter_than_timeout() -> None:
    token = CancelToken.with_timeout(0.01)

    started = time.monotonic()
    assert token.wait(5) is True
    elapsed = time.monotonic() - started

    assert elapsed < 1.0
    assert isinstance(token.error, DeadlineExceeded)


def test_wait_is_woken_by_cancel_from_another_thread() -> None:
    token = CancelToken()
    timer = threading.Timer(0.01, token.cancel)
    timer.start()
    try:
        started = time.monotonic()
        assert token.wait(5) is True
        assert time.monotonic() - started < 1.0
    finally:
        timer.cancel()


def test_child_follows_parent_cancellation() -> None:
    parent = CancelToken()
    child = parent.child()

    parent.cancel()

    assert child.done is True
    assert child.error is parent.error


def test_child_cancel_does_not_affect_parent() -> None:
    parent = CancelToken()
    child = parent.child()

    child.cancel()

    assert child.done is True
    assert parent.done is False


def test_child_of_cancelled_parent_starts_done() -> None:
    parent = CancelToken()
    parent.cancel()

    assert parent.child().done is True


def test_child_inherits_earlier_parent_deadline() -> None:
    clock = _FakeClock()
    parent = CancelToken.with_timeout(1, clock=clock)

    child = parent.child(timeout=10)

    assert child.deadline == parent.deadline
    clock.now += 1
    assert isinstance(child.error, DeadlineExceeded)


def test_child_keeps_own_shorter_deadline() -> None:
    clock = _FakeClock()
    parent = CancelToken.with_timeout(10, clock=clock)

    child = parent.child(timeout=1)
    clock.now += 2

    assert child.done is True
    assert parent.done is False


def test_cancellation_errors_share_a_base_class() -> None:
    assert issubclass(Cancelled, OperationCancelled)
    assert issubclass(DeadlineExceeded, OperationCancelled)


def test_cancelled_children_detach_from_parent() -> None:
    parent = background()

    for _ in range(1000):
        parent.child().cancel()

    assert parent._children == []
    assert parent.done is False


def test_expired_child_detaches_from_parent() -> None:
    clock = _FakeClock()
    parent = CancelToken(clock=clock)
    child = parent.child(timeout=1)
    clock.now += 1

    assert isinstance(child.error, DeadlineExceeded)
    assert parent._children == []


def test_parent_cancel_still_reaches_remaining_children() -> None:
    parent = CancelToken()
    kept = parent.child()
    parent.child().cancel()

    parent.cancel()

    assert kept.done is True
    assert parent._children == []
