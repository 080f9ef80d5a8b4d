# ABOUTME: Exponential backoff retry decorator for AI content generation calls.
# ABOUTME: Retries transport and parse failures a fixed number of times before re-raising.

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

from loguru import logger
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.agents.exceptions import ParseError, TransportError

T = TypeVar("T")

RETRYABLE_ERRORS = (TransportError, ParseError)


def llm_retry(
    max_attempts: int = 2,
    min_wait: float = 0.5,
    max_wait: float = 4.0,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Retry decorator for async AI generation calls with exponential backoff.

    Retries on TransportError and ParseError; any other exception propagates on
    the first attempt. After max_attempts the last error is re-raised so the
    caller can apply its fallback.

    Usage:
        @llm_retry(max_attempts=2)
        async def generate_scene(...):
            ...

    Args:
        max_attempts: Total attempts including the first
        min_wait: Minimum backoff in seconds
        max_wait: Maximum backoff in seconds

    Returns:
        Decorator for async functions
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> T:
            retrying = AsyncRetrying(
                stop=stop_after_attempt(max_attempts),
                wait=wait_exponential(multiplier=min_wait, min=min_wait, max=max_wait),
                retry=retry_if_exception_type(RETRYABLE_ERRORS),
                reraise=True,
            )
            async for attempt in retrying:
                with attempt:
                    try:
                        return await func(*args, **kwargs)
                    except RETRYABLE_ERRORS as e:
                        logger.warning(
                            f"Generation failed in {func.__name__}: {type(e).__name__}: {e}"
                        )
                        raise
            raise AssertionError("unreachable: tenacity re-raises the last error")

        return async_wrapper

    return decorator
