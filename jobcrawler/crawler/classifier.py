"""
Block and site-error detection.

Detection runs at two points because the signal surfaces in different
places: page state right after navigation (inspect), and the message of
an exception reaching the failure path (classify_failure). Both set the
sticky ip_blocked flag; neither touches the error counter, which the
controller increments once per failed attempt.
"""

from typing import Any, Dict, Tuple
from urllib.parse import urlparse

from playwright.async_api import Page

from jobcrawler.core.errors import BlockedError, SiteError
from jobcrawler.core.logging import get_logger
from jobcrawler.crawler.stats import RunStats

logger = get_logger(__name__)


# Redirect targets that mean "you are not welcome anonymously"
BLOCK_PATH_MARKERS: Tuple[str, ...] = ("/login", "/authwall", "/checkpoint", "/uas/login")

SITE_ERROR_PHRASES: Tuple[str, ...] = ("something went wrong", "temporarily unavailable")

BLOCK_MESSAGE_TERMS: Tuple[str, ...] = ("sign-in", "signin", "blocked", "authwall")


def is_block_url(url: str) -> bool:
    """
    True if a resolved URL is a sign-in / auth-wall surface.

    Example:
        >>> is_block_url("https://www.linkedin.com/authwall?trk=gf")
        True
        >>> is_block_url("https://www.linkedin.com/jobs/view/123")
        False
    """
    path = urlparse(url or "").path.lower()
    return any(path.startswith(marker) for marker in BLOCK_PATH_MARKERS)


def find_site_error(body_text: str) -> str:
    """Return the first known error phrase present in the page text, or ""."""
    text = (body_text or "").lower()
    for phrase in SITE_ERROR_PHRASES:
        if phrase in text:
            return phrase
    return ""


def message_indicates_block(message: str) -> bool:
    """
    True if an error message mentions sign-in or blocking.

    Example:
        >>> message_indicates_block("LinkedIn IP blocked - redirected to login")
        True
    """
    text = (message or "").lower()
    return any(term in text for term in BLOCK_MESSAGE_TERMS)


class BlockClassifier:
    """Classifies page state and failures for one run's statistics."""

    def __init__(self, stats: RunStats):
        self.stats = stats

    async def inspect(self, page: Page) -> None:
        """
        Post-navigation check.

        Raises:
            BlockedError: The page resolved to a sign-in surface
            SiteError: The page body carries a known error banner
        """
        url = page.url
        if is_block_url(url):
            logger.error(f"IP BLOCKED: LinkedIn sign-in page detected ({url})")
            self.stats.mark_blocked()
            raise BlockedError(url)

        try:
            body_text = await page.text_content("body") or ""
        except Exception as e:
            logger.debug(f"Could not read body text of {url}: {e}")
            return

        phrase = find_site_error(body_text)
        if phrase:
            logger.error(f"LinkedIn error page detected: '{phrase}' ({url})")
            raise SiteError(url, phrase)

    def check_diagnostics(self, info: Dict[str, Any]) -> bool:
        """
        Flag a block from zero-result page diagnostics.

        A visible sign-in or challenge form on a search page means the
        listing was replaced by a wall.
        """
        blocked = bool(info.get("has_login_form") or info.get("has_challenge_form"))
        if blocked:
            logger.error(f"IP BLOCKED: sign-in/challenge form on {info.get('url')}")
            self.stats.mark_blocked()
        return blocked

    def classify_failure(self, error: BaseException) -> bool:
        """Failure-path check on the exception message; returns True if it indicates a block."""
        if isinstance(error, BlockedError) or message_indicates_block(str(error)):
            self.stats.mark_blocked()
            return True
        return False
