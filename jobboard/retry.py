"""
Exponential backoff for transient store failures.

The repository never retries on its own. SQLAlchemyExecutor opts in through
max_retries and wraps each statement run with exponential_backoff, using
is_transient_error to tell lock or connection trouble from real errors.
"""

import functools
import time
from typing import Callable, Iterator, Optional, Tuple, Type

# Substrings (lowercase) that mark a driver error as worth another attempt
TRANSIENT_MARKERS = (
    "timeout",
    "timed out",
    "connection",
    "could not connect",
    "server closed",
    "database is locked",
    "deadlock detected",
    "temporary failure",
    "too many connections",
)


class RetryError(Exception):
    """Raised when a statement still fails after every allowed attempt."""

    def __init__(self, attempts: int, last_error: Exception):
        super().__init__(f"Failed after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


def backoff_delays(
    retries: int,
    base_delay: float,
    max_delay: float,
    exponential_base: float,
) -> Iterator[float]:
    """Yield the wait before each retry: base, base*k, base*k^2 ... capped at max_delay."""
    delay = base_delay
    for _ in range(retries):
        yield min(delay, max_delay)
        delay *= exponential_base


def exponential_backoff(
    max_retries: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 10.0,
    exponential_base: float = 2.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    should_retry: Optional[Callable[[Exception], bool]] = None,
    on_retry: Optional[Callable[[int, Exception, float], None]] = None,
):
    """
    Decorator retrying the wrapped call on the given exceptions.

    Args:
        max_retries: Attempts after the first one (0 = run once)
        base_delay: Seconds to wait before the first retry
        max_delay: Upper bound for any single wait
        exponential_base: Growth factor between waits
        exceptions: Exception types that may be retried
        should_retry: Predicate; a caught exception it rejects is re-raised as-is
        on_retry: Callback(attempt, exception, delay) before each wait

    Raises:
        RetryError: When the last attempt fails too (chained to that failure)

    Example:
        @exponential_backoff(max_retries=2, exceptions=(OperationalError,),
                             should_retry=is_transient_error)
        def run(statement, params):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            delays = backoff_delays(max_retries, base_delay, max_delay, exponential_base)
            attempt = 0
            while True:
                attempt += 1
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if should_retry is not None and not should_retry(e):
                        raise
                    delay = next(delays, None)
                    if delay is None:
                        raise RetryError(attempt, e) from e
                    if on_retry:
                        on_retry(attempt, e, delay)
                    time.sleep(delay)

        return wrapper
    return decorator


def is_transient_error(exception: Exception) -> bool:
    """True if the error text looks like lock contention, a timeout or a dropped connection."""
    message = str(exception).lower()
    return any(marker in message for marker in TRANSIENT_MARKERS)
