"""
Core utilities for the jobs crawler.

This module contains shared utilities used across all components:
- Configuration management (environment and run input)
- Structured logging
- Error taxonomy and failed-request records
"""

from jobcrawler.core.logging import get_logger, setup_logging, init_crawler_logging
from jobcrawler.core.config import (
    Config,
    CrawlInput,
    ProxySettings,
    get_config,
    validate_config,
)
from jobcrawler.core.errors import (
    BlockedError,
    CrawlerError,
    InputValidationError,
    RequestTimeoutError,
    SiteError,
)
from jobcrawler.core.error_models import (
    FailedRequestRecord,
    FailureKind,
    classify_exception,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "init_crawler_logging",
    "Config",
    "CrawlInput",
    "ProxySettings",
    "get_config",
    "validate_config",
    "BlockedError",
    "CrawlerError",
    "InputValidationError",
    "RequestTimeoutError",
    "SiteError",
    "FailedRequestRecord",
    "FailureKind",
    "classify_exception",
]
