"""Retry policy tests: narrow classification, fixed delay, bounded attempts."""

from __future__ import annotations

import asyncio

import pytest

from tests.helpers import FakeClock
from vitrine.config import Settings
from vitrine.errors import AdapterApplicationError, AdapterTransientError
from vitrine.retry import RETRYABLE_CODES, RetryPolicy, retry_async, should_retry

pytestmark = pytest.mark.unit


def _flaky(failures: list[BaseException], result: str = "ok"):
    attempts: list[int] = []

    async def factory() -> str:
        attempts.append(len(attempts) + 1)
        if failures:
            raise failures.pop(0)
        return result

    return factory, attempts


def test_policy_defaults_and_clamp() -> None:
    assert RetryPolicy() == RetryPolicy(max_attempts=3, delay_s=4.0)
    assert RetryPolicy(max_attempts=10).max_attempts == 5
    with pytest.raises(ValueError, match="max_attempts"):
        RetryPolicy(max_attempts=0)
    with pytest.raises(ValueError, match="delay_s"):
        RetryPolicy(delay_s=-1)


def test_policy_from_settings_converts_milliseconds() -> None:
    policy = RetryPolicy.from_settings(Settings(hf_max_retries=2, hf_retry_delay_ms=1500))
    assert policy == RetryPolicy(max_attempts=2, delay_s=1.5)


@pytest.mark.parametrize("code", sorted(RETRYABLE_CODES))
def test_should_retry_transport_codes(code: str) -> None:
    assert should_retry(AdapterTransientError("x", code=code)) is True


@pytest.mark.parametrize(
    "exc",
    [
        AdapterTransientError("refused", code="ECONNREFUSED"),
        AdapterApplicationError("rate limited", status_code=429),
        AdapterApplicationError("server error", status_code=503),
        # Message text alone never makes an error retryable.
        AdapterApplicationError("ECONNRESET while reading"),
        RuntimeError("ETIMEDOUT"),
        asyncio.CancelledError(),
    ],
)
def test_should_not_retry_other_errors(exc: BaseException) -> None:
    assert should_retry(exc) is False


@pytest.mark.asyncio
async def test_exhausted_retries_reraise_last_error_after_fixed_pauses(
    clock: FakeClock,
) -> None:
    errors = [AdapterTransientError(f"reset {i}", code="ECONNRESET") for i in range(3)]
    factory, attempts = _flaky(list(errors))

    with pytest.raises(AdapterTransientError) as exc_info:
        await retry_async(
            factory, policy=RetryPolicy(max_attempts=3, delay_s=4.0), sleep=clock.sleep
        )

    assert exc_info.value is errors[-1]
    assert attempts == [1, 2, 3]
    assert clock.sleeps == [4.0, 4.0]


@pytest.mark.asyncio
async def test_non_retryable_error_returns_after_one_attempt(clock: FakeClock) -> None:
    factory, attempts = _flaky([AdapterApplicationError("bad prompt", status_code=400)])

    with pytest.raises(AdapterApplicationError):
        await retry_async(factory, policy=RetryPolicy(), sleep=clock.sleep)

    assert attempts == [1]
    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_recovers_after_transient_failure(clock: FakeClock) -> None:
    factory, attempts = _flaky(
        [AdapterTransientError("timeout", code="ECONNABORTED")], result="done"
    )

    result = await retry_async(factory, policy=RetryPolicy(delay_s=1.0), sleep=clock.sleep)

    assert result == "done"
    assert attempts == [1, 2]
    assert clock.sleeps == [1.0]


@pytest.mark.asyncio
async def test_zero_delay_skips_sleep(clock: FakeClock) -> None:
    factory, attempts = _flaky([AdapterTransientError("t", code="ETIMEDOUT")])

    await retry_async(factory, policy=RetryPolicy(delay_s=0), sleep=clock.sleep)

    assert attempts == [1, 2]
    assert clock.sleeps == []
