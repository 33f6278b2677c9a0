"""
Retry logic with exponential backoff.

Nothing in the library retries on its own; callers wrap ledger reads
(or whole preparation calls) in a RetryStrategy when they want to.
"""

import random
import time
from typing import Callable, TypeVar, Optional
from functools import wraps
import logging

from ..exceptions import FlowError, LedgerError

logger = logging.getLogger(__name__)

T = TypeVar('T')


class RetryStrategy:
    """
    Configurable retry strategy with exponential backoff.

    Features:
    - Exponential backoff with jitter
    - Retries only transient ledger failures and connection errors
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        exponential_base: float = 2.0,
        jitter: bool = True
    ):
        """
        Initialize retry strategy.

        Args:
            max_retries: Maximum retry attempts
            base_delay: Initial delay in seconds
            max_delay: Maximum delay in seconds
            exponential_base: Backoff multiplier
            jitter: Add random jitter to delays
        """
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter

    @classmethod
    def from_settings(cls, settings) -> "RetryStrategy":
        """Build from FlowSettings retry fields."""
        return cls(
            max_retries=settings.max_retries,
            max_delay=settings.retry_backoff_max,
            exponential_base=settings.retry_backoff_base
        )

    def _calculate_delay(self, attempt: int) -> float:
        """Calculate delay for attempt with exponential backoff + jitter."""
        delay = min(
            self.base_delay * (self.exponential_base ** attempt),
            self.max_delay
        )

        if self.jitter:
            # ±25%
            jitter_amount = delay * 0.25
            delay += random.uniform(-jitter_amount, jitter_amount)

        return max(0, delay)

    def _should_retry(self, exception: Exception, attempt: int) -> bool:
        """Determine if exception should trigger retry."""
        if attempt >= self.max_retries:
            return False

        if isinstance(exception, LedgerError):
            return exception.retryable

        # Rejected orders and bad signatures never become valid by waiting
        if isinstance(exception, FlowError):
            return False

        if isinstance(exception, (ConnectionError, TimeoutError, OSError)):
            return True

        return False

    def execute(self, func: Callable[..., T], *args, **kwargs) -> T:
        """
        Execute function with retry logic.

        Args:
            func: Function to execute
            *args: Positional arguments
            **kwargs: Keyword arguments

        Returns:
            Function result

        Raises:
            Last exception if all retries exhausted
        """
        name = getattr(func, "__name__", repr(func))
        last_exception: Optional[Exception] = None

        for attempt in range(self.max_retries + 1):
            try:
                return func(*args, **kwargs)

            except Exception as e:
                last_exception = e

                if not self._should_retry(e, attempt):
                    logger.debug(
                        f"Not retrying {name} after attempt {attempt + 1}: "
                        f"{type(e).__name__}"
                    )
                    raise

                delay = self._calculate_delay(attempt)
                logger.warning(
                    f"Retry {attempt + 1}/{self.max_retries} for {name} "
                    f"after {type(e).__name__}: {e}. "
                    f"Waiting {delay:.2f}s"
                )

                time.sleep(delay)

        if last_exception:
            logger.error(f"All {self.max_retries} retries exhausted for {name}")
            raise last_exception

        raise FlowError("Retry logic error")


def with_retry(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0
) -> Callable:
    """
    Decorator to add retry logic to function.

    Args:
        max_retries: Maximum retry attempts
        base_delay: Initial delay in seconds
        max_delay: Maximum delay in seconds

    Returns:
        Decorated function
    """
    def decorator(func: Callable) -> Callable:
        strategy = RetryStrategy(
            max_retries=max_retries,
            base_delay=base_delay,
            max_delay=max_delay
        )

        @wraps(func)
        def wrapper(*args, **kwargs):
            return strategy.execute(func, *args, **kwargs)

        return wrapper

    return decorator
