"""retry_async: attempt budget, backoff delays and which errors are retried."""

import pytest

from app.domain.exceptions import ExternalServiceError, ValidationException
from app.shared.utils.retry import RetryPolicy, retry_async


class _Flaky:
    def __init__(self, failures: int, exc: Exception | None = None) -> None:
        self.failures = failures
        self.calls = 0
        self.exc = exc or ExternalServiceError("down")

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc
        return "ok"


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def record_sleep(sleeps):
    async def _sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return _sleep


async def test_success_first_try_does_not_sleep(sleeps, record_sleep) -> None:
    op = _Flaky(0)
    assert await retry_async(op, RetryPolicy(), sleep=record_sleep) == "ok"
    assert op.calls == 1
    assert sleeps == []


async def test_recovers_after_transient_failures(sleeps, record_sleep) -> None:
    """Two failures then success: three calls, delays base and 2*base."""
    op = _Flaky(2)
    result = await retry_async(op, RetryPolicy(max_attempts=3, base_delay=1.0), sleep=record_sleep)
    assert result == "ok"
    assert op.calls == 3
    assert sleeps == [1.0, 2.0]


async def test_exhausted_raises_last_error(sleeps, record_sleep) -> None:
    op = _Flaky(5)
    with pytest.raises(ExternalServiceError):
        await retry_async(op, RetryPolicy(max_attempts=3, base_delay=0.5), sleep=record_sleep)
    assert op.calls == 3
    assert sleeps == [0.5, 1.0]


async def test_non_retryable_error_propagates_immediately(sleeps, record_sleep) -> None:
    op = _Flaky(1, ValidationException("bad"))
    with pytest.raises(ValidationException):
        await retry_async(op, RetryPolicy(), retry_on=(ExternalServiceError,), sleep=record_sleep)
    assert op.calls == 1
    assert sleeps == []


async def test_single_attempt_policy_never_sleeps(sleeps, record_sleep) -> None:
    op = _Flaky(1)
    with pytest.raises(ExternalServiceError):
        await retry_async(op, RetryPolicy(max_attempts=1), sleep=record_sleep)
    assert sleeps == []


def test_delay_doubles_per_attempt() -> None:
    policy = RetryPolicy(max_attempts=5, base_delay=0.25)
    assert [policy.delay_for(n) for n in range(1, 5)] == [0.25, 0.5, 1.0, 2.0]


@pytest.mark.parametrize("kwargs", [{"max_attempts": 0}, {"base_delay": -1.0}])
def test_policy_rejects_invalid_values(kwargs) -> None:
    with pytest.raises(ValueError):
        RetryPolicy(**kwargs)
