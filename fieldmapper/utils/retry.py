"""Retry composition for callers of the mapping requester.

The requester itself never retries; callers opt in by wrapping their call.
"""

import logging
import time
from functools import wraps
from typing import Callable, Optional, Tuple, Type, TypeVar

from fieldmapper.exceptions import OracleError

logger = logging.getLogger(__name__)

T = TypeVar('T')

RATE_LIMIT_INDICATORS = (
    'rate limit',
    'too many requests',
    'exceeded your current quota',
    'insufficient credits',
)

RATE_LIMIT_STATUS_CODES = (
    402,  # Payment required
    429,  # Too many requests
)


def is_rate_limit_error(exception: BaseException) -> bool:
    """
    Check if an exception (or the exception it was raised from) is a rate limit/quota error.

    Args:
        exception: Exception to check

    Returns:
        True if this is a rate limit error that should not be retried
    """
    current: Optional[BaseException] = exception
    while current is not None:
        if type(current).__name__ == "RateLimitError":
            return True
        if getattr(current, "status_code", None) in RATE_LIMIT_STATUS_CODES:
            return True
        error_str = str(current).lower()
        if any(indicator in error_str for indicator in RATE_LIMIT_INDICATORS):
            return True
        current = current.__cause__
    return False


def is_retryable(exception: BaseException) -> bool:
    """Cancelled requests and rate limit errors are final; anything else may be retried."""
    if isinstance(exception, OracleError) and exception.reason == OracleError.CANCELLED:
        return False
    return not is_rate_limit_error(exception)


def retry_with_backoff(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    backoff_factor: float = 2.0,
    exceptions: Tuple[Type[BaseException], ...] = (OracleError,),
    log_errors: bool = True,
):
    """
    Decorator for retrying functions with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts
        initial_delay: Initial delay in seconds before first retry
        backoff_factor: Multiplier for delay between retries
        exceptions: Tuple of exceptions to catch and retry on
        log_errors: Whether to log retry attempts

    Returns:
        Decorated function
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            delay = initial_delay

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if not is_retryable(e):
                        if log_errors:
                            logger.error(f"{func.__name__} failed with a non-retryable error: {e}")
                        raise

                    if attempt >= max_retries:
                        if log_errors:
                            logger.error(f"{func.__name__} failed after {max_retries + 1} attempts: {e}")
                        raise

                    if log_errors:
                        logger.warning(
                            f"{func.__name__} failed (attempt {attempt + 1}/{max_retries + 1}): {e}. "
                            f"Retrying in {delay:.2f}s..."
                        )
                    time.sleep(delay)
                    delay *= backoff_factor

        return wrapper
    return decorator
