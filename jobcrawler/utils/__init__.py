"""
Shared utilities for the jobs crawler.

- Retry with exponential backoff for sink writes
- Timestamp helpers
"""

from jobcrawler.utils.date_utils import (
    epoch_seconds,
    format_timestamp,
    get_current_timestamp,
    utc_now,
)
from jobcrawler.utils.retry import RetryConfig, retry_with_backoff

__all__ = [
    # Date utilities
    "epoch_seconds",
    "format_timestamp",
    "get_current_timestamp",
    "utc_now",
    # Retry utilities
    "retry_with_backoff",
    "RetryConfig",
]
