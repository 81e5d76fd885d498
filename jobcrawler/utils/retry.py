"""
Exponential backoff for persistence calls.

Request-level retries are owned by the crawl controller (re-enqueue with
an incremented retry count). This module covers the short, in-place
retries around writes to external sinks.
"""

import random
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, Type, TypeVar

from jobcrawler.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Backoff settings for a retried call."""

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0
    jitter: float = 0.0

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.base_delay <= 0:
            raise ValueError("base_delay must be positive")
        if self.max_delay < self.base_delay:
            raise ValueError("max_delay must be >= base_delay")
        if self.exponential_base <= 1:
            raise ValueError("exponential_base must be > 1")
        if self.jitter < 0:
            raise ValueError("jitter must be non-negative")

    def delay_for(self, attempt: int) -> float:
        """
        Seconds to wait before retry number `attempt` (0-based).

        Example:
            >>> RetryConfig(base_delay=1.0).delay_for(2)
            4.0
        """
        delay = min(self.base_delay * (self.exponential_base ** attempt), self.max_delay)
        if self.jitter:
            delay += random.uniform(0, self.jitter)
        return delay


def retry_with_backoff(
    func: Callable[[], T],
    config: Optional[RetryConfig] = None,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    on_retry: Optional[Callable[[int, BaseException], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call func until it succeeds or the retry budget is spent.

    Args:
        func: Zero-argument callable to run
        config: Backoff settings (default: 3 retries, 1s base delay)
        retry_on: Exception types that trigger a retry; others propagate at once
        on_retry: Optional callback(attempt, exception) before each wait
        sleep: Sleep function (injectable for tests)

    Returns:
        Result of the first successful call

    Raises:
        The last exception once retries are exhausted
    """
    if config is None:
        config = RetryConfig()

    for attempt in range(config.max_retries + 1):
        try:
            return func()
        except retry_on as e:
            if attempt == config.max_retries:
                logger.error(f"All {config.max_retries} retries exhausted: {e}")
                raise

            delay = config.delay_for(attempt)
            logger.warning(f"Retry {attempt + 1}/{config.max_retries} after {delay:.2f}s: {e}")

            if on_retry:
                on_retry(attempt + 1, e)

            sleep(delay)

    raise RuntimeError("Retry logic error")
