"""Tests for the tenacity retry-loop driver."""

from unittest.mock import MagicMock

import httpx
import pytest
from structlog.testing import capture_logs
from tenacity import RetryCallState

from pi_network import (
    AuthenticationError,
    HttpError,
    InsufficientBalanceError,
    PiNetworkError,
    RetryPolicy,
    TimeoutExceededError,
)
from pi_network.retry import RETRYABLE_ERRORS, async_retrying, retrying, wait_retry_policy

REQUEST = httpx.Request("GET", "https://api.minepi.com/v2/me")


def _transport_error() -> HttpError:
    return HttpError(httpx.ConnectError("connection refused", request=REQUEST))


def test_retryable_errors():
    """Test that only transport failures and timeouts are retried by default."""
    assert RETRYABLE_ERRORS == (HttpError, TimeoutExceededError)


def test_wait_follows_policy():
    """Test that the wait strategy maps attempt numbers to policy delays."""
    policy = RetryPolicy()
    wait = wait_retry_policy(policy)
    for attempt_number, expected in [(1, 0.1), (2, 0.2), (3, 0.4), (11, 10.0)]:
        retry_state = MagicMock(spec=RetryCallState)
        retry_state.attempt_number = attempt_number
        assert wait(retry_state) == pytest.approx(expected)


def test_retrying_sleeps_policy_schedule():
    """Test that retries sleep the policy delays and re-raise at the end."""
    sleeps = []
    func = MagicMock(side_effect=_transport_error())

    retryer = retrying(RetryPolicy(), sleep=sleeps.append)
    with pytest.raises(HttpError):
        retryer(func)

    assert func.call_count == 4
    assert sleeps == pytest.approx([0.1, 0.2, 0.4])


def test_retrying_recovers():
    """Test that a call succeeding after transient failures returns its value."""
    sleeps = []
    func = MagicMock(side_effect=[TimeoutExceededError(30.0), _transport_error(), "ok"])

    result = retrying(RetryPolicy(), sleep=sleeps.append)(func)

    assert result == "ok"
    assert func.call_count == 3
    assert sleeps == pytest.approx([0.1, 0.2])


def test_retrying_zero_retries_single_attempt():
    """Test that max_retries=0 makes exactly one attempt."""
    sleeps = []
    func = MagicMock(side_effect=_transport_error())

    with pytest.raises(HttpError):
        retrying(RetryPolicy(max_retries=0), sleep=sleeps.append)(func)

    assert func.call_count == 1
    assert sleeps == []


@pytest.mark.parametrize(
    "error",
    [
        AuthenticationError("Invalid key"),
        InsufficientBalanceError(5.0, 10.0),
        PiNetworkError("already_completed", "Payment already completed"),
    ],
)
def test_retrying_does_not_retry_terminal_errors(error):
    """Test that terminal variants are raised on the first attempt."""
    sleeps = []
    func = MagicMock(side_effect=error)

    with pytest.raises(type(error)) as exc_info:
        retrying(RetryPolicy(), sleep=sleeps.append)(func)

    assert exc_info.value is error
    assert func.call_count == 1
    assert sleeps == []


def test_retrying_custom_retry_on():
    """Test overriding which errors are retried."""
    sleeps = []
    func = MagicMock(side_effect=[PiNetworkError("ongoing", "Try again"), "ok"])

    retryer = retrying(RetryPolicy(), retry_on=(PiNetworkError,), sleep=sleeps.append)

    assert retryer(func) == "ok"
    assert sleeps == pytest.approx([0.1])


@pytest.mark.asyncio
async def test_async_retrying_sleeps_policy_schedule():
    """Test the async driver with a recorded sleep."""
    sleeps = []
    calls = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    async def fetch():
        calls.append(1)
        if len(calls) < 3:
            raise _transport_error()
        return {"uid": "user-1"}

    retryer = async_retrying(RetryPolicy(initial_delay=0.5, max_delay=0.8), sleep=fake_sleep)
    result = await retryer(fetch)

    assert result == {"uid": "user-1"}
    assert len(calls) == 3
    assert sleeps == pytest.approx([0.5, 0.8])


@pytest.mark.asyncio
async def test_async_retrying_exhausted():
    """Test that the async driver re-raises the last error."""

    async def fake_sleep(seconds):
        pass

    async def fetch():
        raise TimeoutExceededError(1.5)

    with pytest.raises(TimeoutExceededError, match="1.5s"):
        await async_retrying(RetryPolicy(max_retries=2), sleep=fake_sleep)(fetch)


def test_retrying_logs_each_retry():
    """Test that every retry emits a warning with attempt and delay."""
    func = MagicMock(side_effect=[TimeoutExceededError(30.0), _transport_error(), "ok"])

    with capture_logs() as logs:
        retrying(RetryPolicy(), sleep=lambda seconds: None)(func)

    retries = [entry for entry in logs if entry["event"] == "Retrying Pi Network request"]
    assert [entry["attempt"] for entry in retries] == [1, 2]
    assert [entry["delay"] for entry in retries] == pytest.approx([0.1, 0.2])
    assert [entry["kind"] for entry in retries] == ["timeout", "http"]
    assert all(entry["log_level"] == "warning" for entry in retries)
