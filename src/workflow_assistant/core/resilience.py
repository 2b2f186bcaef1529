"""Centralized resilience patterns.

Two families of policies live here:

- Storage retry (tenacity): bounded, fixed-schedule retry for database
  operations. Only ``TransientStorageError`` is retried; classification is a
  type check against the storage error hierarchy, never message matching.
- LLM resilience (hyx): retry with exponential backoff, circuit breaker and
  timeout around single Responses API calls.

Usage:
    from workflow_assistant.core.resilience import with_retry, llm_resilient

    await with_retry(lambda: repository_call(...))

    @llm_resilient
    async def call_llm_api(...):
        ...
"""

import asyncio
from dataclasses import dataclass
from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar

from hyx.circuitbreaker.api import consecutive_breaker
from hyx.circuitbreaker.exceptions import BreakerFailing
from hyx.retry.api import retry
from hyx.retry.backoffs import expo
from hyx.timeout.exceptions import MaxDurationExceeded
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_chain,
    wait_fixed,
)

from workflow_assistant.core.exceptions import RetryExhaustedError, TransientStorageError
from workflow_assistant.utils.logging import get_logger

# Alias for clarity
BreakerOpen = BreakerFailing
MaxTimeoutExceeded = MaxDurationExceeded

__all__ = [
    # Exceptions
    "BreakerOpen",
    "MaxTimeoutExceeded",
    "TransientError",
    "RateLimitError",
    # Storage patterns
    "RetryPolicy",
    "DEFAULT_RETRY_POLICY",
    "with_retry",
    # LLM patterns
    "llm_retry",
    "llm_circuit_breaker",
    "llm_timeout",
    "llm_resilient",
    "wrap_openai_errors",
    # Configuration
    "ResilienceConfig",
]

logger = get_logger(__name__)

T = TypeVar("T")


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================


class TransientError(Exception):
    """Error that is likely to succeed on retry (network issues, timeouts)."""
    pass


class RateLimitError(Exception):
    """Error indicating rate limiting (HTTP 429, throttling)."""
    pass


# =============================================================================
# CONFIGURATION
# =============================================================================


class ResilienceConfig:
    """Centralized configuration for resilience patterns."""

    # Storage Configuration
    STORAGE_RETRY_ATTEMPTS: int = 3
    STORAGE_RETRY_DELAYS: tuple[float, ...] = (1.0, 2.0, 4.0)  # seconds

    # LLM Configuration
    LLM_RETRY_ATTEMPTS: int = 3
    LLM_RETRY_BACKOFF_BASE: float = 2.0  # seconds (longer for rate limits)
    LLM_RETRY_BACKOFF_MAX: float = 60.0  # seconds

    LLM_CIRCUIT_FAILURE_THRESHOLD: int = 3
    LLM_CIRCUIT_RECOVERY_TIME: float = 60.0  # seconds
    LLM_CIRCUIT_RECOVERY_THRESHOLD: int = 1

    LLM_TIMEOUT: float = 120.0  # seconds (LLM calls can be slow)


# =============================================================================
# STORAGE RETRY
# =============================================================================


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry schedule for storage operations.

    ``delays[n]`` is the pause after the (n+1)-th failed attempt.
    """

    max_attempts: int = ResilienceConfig.STORAGE_RETRY_ATTEMPTS
    delays: tuple[float, ...] = ResilienceConfig.STORAGE_RETRY_DELAYS


DEFAULT_RETRY_POLICY = RetryPolicy()


def _log_failed_attempt(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "storage_retry",
        attempt=retry_state.attempt_number,
        error=str(exc),
    )


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
    *,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> T:
    """
    Run a storage operation under the retry policy.

    Args:
        operation: Zero-argument coroutine factory; called once per attempt
        policy: Attempt count and delay schedule
        sleep: Awaitable sleep, injectable for tests

    Returns:
        The operation's result

    Raises:
        RetryExhaustedError: Every attempt failed with TransientStorageError
        Exception: Any non-transient error, after the first attempt
    """
    retrying = AsyncRetrying(
        sleep=sleep,
        retry=retry_if_exception_type(TransientStorageError),
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_chain(*(wait_fixed(d) for d in policy.delays)),
        before_sleep=_log_failed_attempt,
    )

    try:
        async for attempt in retrying:
            with attempt:
                result = await operation()
    except RetryError as e:
        last = e.last_attempt.exception()
        logger.error(
            "storage_retry_exhausted",
            attempts=policy.max_attempts,
            error=str(last),
        )
        raise RetryExhaustedError(
            f"Operation failed after {policy.max_attempts} attempts: {last}",
            attempts=policy.max_attempts,
        ) from last

    return result


# =============================================================================
# LLM RESILIENCE PATTERNS
# =============================================================================


# Retry for LLM API calls with exponential backoff
llm_retry = retry(
    on=(TransientError, RateLimitError),
    attempts=ResilienceConfig.LLM_RETRY_ATTEMPTS,
    backoff=expo(
        min_delay_secs=ResilienceConfig.LLM_RETRY_BACKOFF_BASE,
        max_delay_secs=ResilienceConfig.LLM_RETRY_BACKOFF_MAX,
    ),
)

# Circuit breaker for the completion provider
llm_circuit_breaker = consecutive_breaker(
    exceptions=(TransientError, RateLimitError),
    failure_threshold=ResilienceConfig.LLM_CIRCUIT_FAILURE_THRESHOLD,
    recovery_time_secs=ResilienceConfig.LLM_CIRCUIT_RECOVERY_TIME,
    recovery_threshold=ResilienceConfig.LLM_CIRCUIT_RECOVERY_THRESHOLD,
)

F = TypeVar("F", bound=Callable[..., Any])


# Timeout for LLM operations - lazy wrapper to avoid event loop issues at import time
def llm_timeout(func: F) -> F:
    """Apply the LLM timeout with runtime-created timers."""

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await asyncio.wait_for(
                func(*args, **kwargs),
                timeout=ResilienceConfig.LLM_TIMEOUT,
            )
        except asyncio.TimeoutError:
            raise MaxTimeoutExceeded(
                f"Operation timed out after {ResilienceConfig.LLM_TIMEOUT}s"
            )

    return wrapper  # type: ignore


def wrap_openai_errors(func: F) -> F:
    """
    Decorator to convert OpenAI SDK exceptions to resilience-aware exceptions.

    Client errors (4xx other than 429) are left alone; the caller decides
    how to surface them.
    """

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        import openai

        try:
            return await func(*args, **kwargs)
        except openai.RateLimitError as e:
            raise RateLimitError(f"OpenAI rate limit: {e}") from e
        except openai.APITimeoutError as e:
            raise TransientError(f"OpenAI timeout: {e}") from e
        except openai.APIConnectionError as e:
            raise TransientError(f"OpenAI connection error: {e}") from e
        except openai.InternalServerError as e:
            raise TransientError(f"OpenAI server error: {e}") from e

    return wrapper  # type: ignore


def llm_resilient(func: F) -> F:
    """
    Apply full LLM resilience stack to a function.

    Applies (outermost first):
    1. Retry with exponential backoff
    2. Circuit breaker
    3. Timeout
    4. Provider-specific error classification
    """
    wrapped = wrap_openai_errors(func)
    wrapped = llm_timeout(wrapped)
    wrapped = llm_circuit_breaker(wrapped)
    wrapped = llm_retry(wrapped)

    return wrapped  # type: ignore
