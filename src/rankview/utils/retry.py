"""
Async Retry Utility with Exponential Backoff.

Query requests are retried only when a ``RetryConfig`` asks for more than
one attempt. The default configuration makes a single attempt, so a failed
request aborts the current fill and a later page request tries again.

Usage:
------
    from rankview.utils.retry import RetryConfig, execute_with_retry

    config = RetryConfig(max_attempts=3, base_delay=0.5)
    response = await execute_with_retry(client.query, request, config=config)
"""

import asyncio
import random
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, TypeVar

from loguru import logger

from rankview.errors import (
    PermanentError,
    RankViewError,
    RateLimitError,
    RetryableError,
    is_retryable,
)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """
    Configuration for retry behavior.

    Attributes:
        max_attempts: Maximum number of attempts (including initial)
        base_delay: Initial delay between retries (seconds)
        max_delay: Maximum delay between retries (seconds)
        exponential_base: Base for exponential backoff (delay = base_delay * exponential_base^attempt)
        jitter: Add random jitter to delays (0.0 to 1.0, fraction of delay)
        retry_on: Tuple of exception types to retry on
        stop_on: Tuple of exception types to never retry on
        on_retry: Callback called before each retry (attempt, error, delay) -> None
        respect_retry_after: Honor Retry-After from RateLimitError
    """

    max_attempts: int = 1
    base_delay: float = 0.5
    max_delay: float = 30.0
    exponential_base: float = 2.0
    jitter: float = 0.1
    retry_on: tuple[type[Exception], ...] = (RetryableError,)
    stop_on: tuple[type[Exception], ...] = (PermanentError,)
    on_retry: Callable[[int, Exception, float], None] | None = None
    respect_retry_after: bool = True

    def __post_init__(self):
        """Validate configuration values."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must be non-negative")
        if self.max_delay < self.base_delay:
            raise ValueError("max_delay must be >= base_delay")
        if not 0 <= self.jitter <= 1:
            raise ValueError("jitter must be between 0 and 1")


@dataclass
class RetryState:
    """Tracks the state of a retry operation."""

    attempt: int = 0
    total_delay: float = 0.0
    errors: list[Exception] = field(default_factory=list)
    start_time: float = field(default_factory=time.monotonic)

    @property
    def elapsed_time(self) -> float:
        """Total elapsed time since first attempt."""
        return time.monotonic() - self.start_time


def calculate_delay(
    attempt: int,
    config: RetryConfig,
    error: Exception | None = None
) -> float:
    """
    Calculate delay before next retry attempt.

    Args:
        attempt: Current attempt number (1-based)
        config: Retry configuration
        error: The exception that triggered the retry

    Returns:
        Delay in seconds before next attempt
    """
    if config.respect_retry_after and isinstance(error, RateLimitError):
        if error.retry_after is not None and error.retry_after > 0:
            logger.debug(f"Using Retry-After header: {error.retry_after}s")
            return min(error.retry_after, config.max_delay)

    delay = config.base_delay * (config.exponential_base ** (attempt - 1))

    if config.jitter > 0:
        jitter_range = delay * config.jitter
        delay += random.uniform(-jitter_range, jitter_range)

    delay = min(delay, config.max_delay)
    return max(delay, 0)


def should_retry(
    error: Exception,
    attempt: int,
    config: RetryConfig
) -> bool:
    """
    Determine if an error should trigger a retry.

    Args:
        error: The exception that was raised
        attempt: Current attempt number
        config: Retry configuration

    Returns:
        True if should retry, False otherwise
    """
    if attempt >= config.max_attempts:
        return False

    if isinstance(error, config.stop_on):
        logger.debug(f"Error type {type(error).__name__} in stop_on list, not retrying")
        return False

    if isinstance(error, config.retry_on):
        return True

    return is_retryable(error)


async def execute_with_retry(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    config: RetryConfig | None = None,
    **kwargs: Any
) -> T:
    """
    Await ``func(*args, **kwargs)``, retrying retryable failures with backoff.

    Args:
        func: Coroutine function to execute
        *args: Positional arguments for func
        config: Retry configuration (single attempt when omitted)
        **kwargs: Keyword arguments for func

    Returns:
        Result of func

    Raises:
        The last error once attempts are exhausted or a non-retryable error occurs
    """
    config = config or RetryConfig()
    state = RetryState()
    name = getattr(func, "__qualname__", repr(func))

    while True:
        state.attempt += 1
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            state.errors.append(e)
            _log_error(name, state.attempt, config.max_attempts, e)

            if not should_retry(e, state.attempt, config):
                if state.attempt > 1:
                    logger.warning(
                        f"[{name}] Giving up after {state.attempt} attempts "
                        f"({state.elapsed_time:.2f}s): {type(e).__name__}: {e}"
                    )
                raise

            delay = calculate_delay(state.attempt, config, e)
            state.total_delay += delay

            if config.on_retry:
                try:
                    config.on_retry(state.attempt, e, delay)
                except Exception as callback_error:
                    logger.warning(f"on_retry callback failed: {callback_error}")

            logger.warning(
                f"[{name}] Retrying in {delay:.2f}s "
                f"(attempt {state.attempt}/{config.max_attempts}) "
                f"after {type(e).__name__}: {e}"
            )
            await asyncio.sleep(delay)


def _log_error(func_name: str, attempt: int, max_attempts: int, error: Exception) -> None:
    error_info = {
        "function": func_name,
        "attempt": attempt,
        "max_attempts": max_attempts,
        "error_type": type(error).__name__,
        "error_message": str(error),
    }

    if isinstance(error, RankViewError):
        error_info["details"] = error.details

    logger.debug(f"[{func_name}] Attempt {attempt} failed: {error_info}")
