"""
test_retry.py — Client-side retry/backoff tests.
"""
import pytest

from retry import RetryError, calculate_backoff_delay, with_retry


class Flaky:
    """Fails `failures` times, then returns "ok"."""

    def __init__(self, failures, exc=ConnectionError):
        self.failures = failures
        self.exc = exc
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc(f"boom {self.calls}")
        return "ok"


def test_returns_first_success_without_sleeping():
    sleeps = []
    op = Flaky(0)
    assert with_retry(op, sleep=sleeps.append) == "ok"
    assert op.calls == 1
    assert sleeps == []


def test_retries_until_success():
    sleeps = []
    op = Flaky(2)
    assert with_retry(op, max_retries=3, sleep=sleeps.append) == "ok"
    assert op.calls == 3
    assert len(sleeps) == 2


def test_exhausted_attempts_raise_retry_error():
    sleeps = []
    op = Flaky(10)
    with pytest.raises(RetryError) as exc:
        with_retry(op, {"operation": "login"}, max_retries=2, sleep=sleeps.append)
    assert op.calls == 3
    assert len(sleeps) == 2
    assert exc.value.attempts == 3
    assert exc.value.context == {"operation": "login"}
    assert isinstance(exc.value.original, ConnectionError)
    assert "after 3 attempts" in str(exc.value)


def test_non_retryable_errors_propagate_immediately():
    op = Flaky(1, exc=KeyError)
    with pytest.raises(KeyError):
        with_retry(op, retry_on=(ConnectionError,), sleep=lambda s: None)
    assert op.calls == 1


@pytest.mark.parametrize("attempt,low,high", [
    (1, 1.0, 1.1),
    (2, 2.0, 2.2),
    (3, 4.0, 4.4),
    (4, 8.0, 8.8),
    (5, 10.0, 11.0),   # capped
    (9, 10.0, 11.0),
])
def test_backoff_delay_bounds(attempt, low, high):
    for _ in range(20):
        delay = calculate_backoff_delay(attempt)
        assert low <= delay <= high
