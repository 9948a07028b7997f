"""Tests for RetryPolicy."""

from __future__ import annotations

import pytest

from settings_sync.messaging.retry import Backoff, RetryPolicy


def test_should_retry_respects_max_attempts() -> None:
    policy = RetryPolicy(max_attempts=3)
    assert policy.should_retry(1) is True
    assert policy.should_retry(2) is True
    assert policy.should_retry(3) is False
    assert policy.should_retry(0) is False


def test_single_attempt_never_retries() -> None:
    policy = RetryPolicy(max_attempts=1)
    assert policy.should_retry(1) is False


def test_fixed_backoff_keeps_base_delay() -> None:
    policy = RetryPolicy(base_delay=1.0, max_delay=60.0)
    assert policy.backoff is Backoff.FIXED
    assert policy.delay_for_attempt(1) == 1.0
    assert policy.delay_for_attempt(5) == 1.0


def test_exponential_backoff_doubles_and_caps() -> None:
    policy = RetryPolicy(base_delay=1.0, max_delay=5.0, backoff="exponential")
    assert policy.delay_for_attempt(1) == 1.0
    assert policy.delay_for_attempt(2) == 2.0
    assert policy.delay_for_attempt(3) == 4.0
    assert policy.delay_for_attempt(4) == 5.0


def test_delay_for_attempt_zero_is_zero() -> None:
    assert RetryPolicy(base_delay=1.0).delay_for_attempt(0) == 0.0


def test_jitter_stays_in_range() -> None:
    policy = RetryPolicy(base_delay=2.0, max_delay=2.0, jitter=True)
    for _ in range(50):
        d = policy.delay_for_attempt(1)
        assert 1.0 <= d <= 3.0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_attempts": 0},
        {"base_delay": -1.0},
        {"base_delay": 10.0, "max_delay": 5.0},
        {"backoff": "linear"},
    ],
)
def test_invalid_arguments_raise(kwargs: dict[str, object]) -> None:
    with pytest.raises(ValueError):
        RetryPolicy(**kwargs)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_wait_before_retry_uses_injected_sleep(sleep) -> None:
    policy = RetryPolicy(base_delay=0.5, sleep=sleep)
    await policy.wait_before_retry(1)
    await policy.wait_before_retry(2)
    assert sleep.calls == [0.5, 0.5]


@pytest.mark.asyncio
async def test_wait_before_retry_skips_zero_delay(sleep) -> None:
    policy = RetryPolicy(base_delay=0.0, max_delay=0.0, sleep=sleep)
    await policy.wait_before_retry(1)
    assert sleep.calls == []
