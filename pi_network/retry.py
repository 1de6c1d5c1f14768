"""
Retry-loop driver built on tenacity.

``RetryPolicy`` only knows how long to wait; which errors are worth another
attempt is decided here, by matching on the ``PiError`` variant.
"""

from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
)
from tenacity.wait import wait_base

from .config import RetryPolicy
from .exceptions import HttpError, PiError, TimeoutExceededError

logger = structlog.get_logger()

RETRYABLE_ERRORS: tuple[type[PiError], ...] = (HttpError, TimeoutExceededError)


class wait_retry_policy(wait_base):
    """Wait strategy that follows ``RetryPolicy.delay_for``."""

    def __init__(self, policy: RetryPolicy) -> None:
        self.policy = policy

    def __call__(self, retry_state: RetryCallState) -> float:
        # attempt_number is 1 once the first attempt has failed
        return self.policy.delay_for(retry_state.attempt_number - 1)


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Retrying Pi Network request",
        attempt=retry_state.attempt_number,
        delay=retry_state.next_action.sleep if retry_state.next_action else None,
        error=str(error),
        kind=error.kind.value if isinstance(error, PiError) else None,
    )


def _retrying_kwargs(
    policy: RetryPolicy, retry_on: tuple[type[BaseException], ...]
) -> dict[str, Any]:
    return {
        "stop": stop_after_attempt(policy.max_retries + 1),
        "wait": wait_retry_policy(policy),
        "retry": retry_if_exception_type(retry_on),
        "before_sleep": _log_retry,
        "reraise": True,
    }


def retrying(
    policy: RetryPolicy,
    *,
    retry_on: tuple[type[BaseException], ...] = RETRYABLE_ERRORS,
    sleep: Callable[[float], None] | None = None,
) -> Retrying:
    """
    Build a synchronous tenacity controller for a policy.

    Args:
        policy: Backoff policy to follow
        retry_on: Error types that trigger another attempt
        sleep: Sleep function override, mostly for tests

    Returns:
        Retrying that makes at most ``max_retries + 1`` attempts and
        re-raises the last error once they are exhausted

    Example:
        ```python
        retryer = retrying(config.retry_policy)
        payment = retryer(fetch_payment, payment_id)
        ```
    """
    kwargs = _retrying_kwargs(policy, retry_on)
    if sleep is not None:
        kwargs["sleep"] = sleep
    return Retrying(**kwargs)


def async_retrying(
    policy: RetryPolicy,
    *,
    retry_on: tuple[type[BaseException], ...] = RETRYABLE_ERRORS,
    sleep: Callable[[float], Awaitable[None]] | None = None,
) -> AsyncRetrying:
    """Async counterpart of ``retrying``."""
    kwargs = _retrying_kwargs(policy, retry_on)
    if sleep is not None:
        kwargs["sleep"] = sleep
    return AsyncRetrying(**kwargs)
