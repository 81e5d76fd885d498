"""
Exception types raised by the crawl engine.

Per-request errors (BlockedError, SiteError, RequestTimeoutError and any
other exception escaping a handler) are contained by the controller and
retried. InputValidationError is raised before any navigation and aborts
the run.
"""

from typing import List, Optional


class CrawlerError(Exception):
    """Base class for crawler errors."""


class InputValidationError(CrawlerError, ValueError):
    """Run input failed validation; nothing has been navigated yet."""

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__(
            "Input validation failed:\n" + "\n".join(f"  - {p}" for p in self.problems)
        )


class BlockedError(CrawlerError):
    """The target redirected to a sign-in / auth-wall surface."""

    def __init__(self, url: str, message: Optional[str] = None):
        self.url = url
        super().__init__(message or f"LinkedIn IP blocked - redirected to login ({url})")


class SiteError(CrawlerError):
    """The target rendered one of its generic error pages."""

    def __init__(self, url: str, phrase: str):
        self.url = url
        self.phrase = phrase
        super().__init__(f"LinkedIn error page: '{phrase}' ({url})")


class RequestTimeoutError(CrawlerError):
    """A request handler exceeded its time budget."""

    def __init__(self, url: str, timeout_s: float):
        self.url = url
        self.timeout_s = timeout_s
        super().__init__(f"Request handler timed out after {timeout_s:g}s ({url})")
