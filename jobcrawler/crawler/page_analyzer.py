"""
Page-state helpers used by the request handlers.

Bounded waits, listing counts, lazy-load scrolling and the diagnostic
snapshot taken when a search page shows no results. None of these raise
on a missing element; waits report success as a bool.
"""

from typing import Any, Dict

from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from jobcrawler.core.logging import get_logger
from jobcrawler.crawler.schema import ExtractionSchema

logger = get_logger(__name__)

SCROLL_ONE_VIEWPORT_JS = "() => window.scrollBy(0, window.innerHeight)"

# Body text kept in diagnostics
DIAGNOSTIC_TEXT_CHARS = 500


async def wait_for_ready(page: Page, selector: str, timeout_ms: int) -> bool:
    """
    Wait up to timeout_ms for selector to attach.

    Returns False on timeout instead of raising; the caller carries on with
    whatever rendered.

    Example:
        >>> ready = await wait_for_ready(page, ".base-card", 15_000)
    """
    try:
        await page.wait_for_selector(selector, timeout=timeout_ms, state="attached")
        return True
    except PlaywrightTimeoutError:
        return False


async def count_listings(page: Page, selector: str) -> int:
    """Number of elements matching the listing-card selector."""
    try:
        return len(await page.query_selector_all(selector))
    except Exception as e:
        logger.debug(f"Could not count {selector!r}: {e}")
        return 0


async def scroll_and_settle(page: Page, settle_ms: int) -> None:
    """Scroll one viewport down and give lazy content settle_ms to render."""
    try:
        await page.evaluate(SCROLL_ONE_VIEWPORT_JS)
    except Exception as e:
        logger.debug(f"Scroll failed on {page.url}: {e}")
    await page.wait_for_timeout(settle_ms)


async def _present(page: Page, selector: str) -> bool:
    try:
        return await page.query_selector(selector) is not None
    except Exception:
        return False


async def page_diagnostics(page: Page, schema: ExtractionSchema) -> Dict[str, Any]:
    """
    Snapshot of a page that yielded no listings.

    Returns:
        Dict with title, url, truncated body_text and marker flags
        (has_login_form, has_challenge_form, has_jobs_container)
    """
    try:
        title = await page.title()
    except Exception:
        title = ""
    try:
        body_text = (await page.text_content("body") or "").strip()
    except Exception:
        body_text = ""

    return {
        "title": title,
        "url": page.url,
        "body_text": body_text[:DIAGNOSTIC_TEXT_CHARS],
        "has_login_form": await _present(page, schema.login_form),
        "has_challenge_form": await _present(page, schema.challenge_form),
        "has_jobs_container": await _present(page, schema.jobs_container),
    }
