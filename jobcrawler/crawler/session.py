"""
Anti-detection session management.

Runs before every navigation:
- random desktop user agent plus a realistic static header set
- an init script hiding the most common automation tells
- optional authenticated session cookies, injected once per browser context
- a randomized pause so requests do not arrive at a fixed interval

Each step is independent; a failure is logged and the navigation goes ahead.
"""

import asyncio
import json
import random
import weakref
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import ValidationError
from playwright.async_api import BrowserContext, Page

from jobcrawler.core.logging import get_logger
from jobcrawler.db.models import SessionCookie
from jobcrawler.utils.date_utils import epoch_seconds

logger = get_logger(__name__)


USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.1 Safari/605.1.15",
]

BASE_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate, br",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
    "Cache-Control": "max-age=0",
}

SPOOFED_PLATFORM = "Linux x86_64"

# Runs in every frame before any page script
STEALTH_INIT_JS = f"""
Object.defineProperty(navigator, 'webdriver', {{ get: () => false }});
Object.defineProperty(navigator, 'platform', {{ get: () => '{SPOOFED_PLATFORM}' }});
"""

# Browser-extension exports use lowercase / Chrome-API values
SAME_SITE_VALUES = {
    "no_restriction": "None",
    "none": "None",
    "lax": "Lax",
    "strict": "Strict",
}
DEFAULT_SAME_SITE = "Lax"


class CookiePayloadError(ValueError):
    """The session-cookie payload is not a list of cookie objects."""


def normalize_same_site(value: Any) -> str:
    """
    Map any sameSite representation onto Lax, Strict or None.

    Unknown values (including "unspecified") fall back to Lax.

    Example:
        >>> normalize_same_site("no_restriction")
        'None'
        >>> normalize_same_site("unspecified")
        'Lax'
    """
    if not isinstance(value, str):
        return DEFAULT_SAME_SITE
    return SAME_SITE_VALUES.get(value.strip().lower(), DEFAULT_SAME_SITE)


def normalize_cookie(raw: Dict[str, Any]) -> SessionCookie:
    """
    Convert one cookie (Playwright shape or extension export) to SessionCookie.

    Raises:
        ValidationError: If name or domain is missing
    """
    secure = raw.get("secure")
    http_only = raw.get("httpOnly", raw.get("http_only"))

    if raw.get("expirationDate") is not None:
        expires = epoch_seconds(raw.get("expirationDate"))
    else:
        expires = epoch_seconds(raw.get("expires"))

    return SessionCookie(
        name=raw.get("name") or "",
        value=str(raw.get("value") if raw.get("value") is not None else ""),
        domain=raw.get("domain") or "",
        path=raw.get("path") or "/",
        httpOnly=bool(http_only) if http_only is not None else False,
        secure=bool(secure) if secure is not None else True,
        sameSite=normalize_same_site(raw.get("sameSite", raw.get("same_site"))),
        expires=expires,
    )


def parse_cookie_payload(payload: Any) -> List[Any]:
    """
    Accept a list of cookies or its JSON string form.

    Raises:
        CookiePayloadError: If the payload is not (or does not decode to) a list
    """
    cookies = payload
    if isinstance(payload, (str, bytes)):
        try:
            cookies = json.loads(payload)
        except json.JSONDecodeError as e:
            raise CookiePayloadError(f"Cookies are not valid JSON: {e}") from e
    if not isinstance(cookies, list):
        raise CookiePayloadError("Cookies must be an array")
    return cookies


def load_session_cookies(payload: Any, debug: bool = False) -> List[SessionCookie]:
    """
    Parse and normalize a session-cookie payload without raising.

    A malformed payload yields [] and a warning; individual malformed
    entries are skipped.
    """
    if payload is None:
        return []
    try:
        raw_cookies = parse_cookie_payload(payload)
    except CookiePayloadError as e:
        logger.warning(f"Failed to parse LinkedIn cookies: {e}")
        if debug:
            logger.warning(f"Cookie input type: {type(payload).__name__}")
            try:
                preview = json.dumps(payload, default=str)
            except (TypeError, ValueError):
                preview = repr(payload)
            logger.warning(f"Cookie input value: {preview[:200]}...")
        return []

    cookies: List[SessionCookie] = []
    for index, raw in enumerate(raw_cookies):
        if not isinstance(raw, dict):
            logger.warning(f"Skipping cookie #{index}: expected an object, got {type(raw).__name__}")
            continue
        try:
            cookies.append(normalize_cookie(raw))
        except ValidationError as e:
            logger.warning(f"Skipping cookie #{index} ({raw.get('name')!r}): {e.error_count()} invalid field(s)")
    return cookies


class SessionManager:
    """
    Pre-navigation disguise for every request.

    Example:
        >>> session = SessionManager(cookies_payload=cookies_json, min_delay_ms=2000, max_delay_ms=5000)
        >>> await session.prepare(page)
        >>> await page.goto(url)
    """

    def __init__(
        self,
        cookies_payload: Any = None,
        min_delay_ms: int = 2000,
        max_delay_ms: int = 5000,
        debug: bool = False,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if min_delay_ms > max_delay_ms:
            raise ValueError("min_delay_ms cannot be greater than max_delay_ms")
        self.min_delay_ms = min_delay_ms
        self.max_delay_ms = max_delay_ms
        self.debug = debug
        self._rng = rng or random.Random()
        self._sleep = sleep
        self.cookies = load_session_cookies(cookies_payload, debug=debug)
        self._seeded_contexts: "weakref.WeakSet[BrowserContext]" = weakref.WeakSet()

    def random_user_agent(self) -> str:
        return self._rng.choice(USER_AGENTS)

    def build_headers(self) -> Dict[str, str]:
        """Static header set plus a freshly drawn user agent."""
        headers = {"User-Agent": self.random_user_agent()}
        headers.update(BASE_HEADERS)
        return headers

    async def random_delay(self) -> float:
        """Sleep for a uniform random duration in [min, max] ms; returns seconds slept."""
        delay_s = self._rng.uniform(self.min_delay_ms, self.max_delay_ms) / 1000
        if delay_s > 0:
            await self._sleep(delay_s)
        return delay_s

    async def inject_cookies(self, context: BrowserContext) -> bool:
        """Add the session cookies to a context the first time it is seen."""
        if not self.cookies or context in self._seeded_contexts:
            return False
        await context.add_cookies([c.to_playwright() for c in self.cookies])
        self._seeded_contexts.add(context)
        logger.info(f"LinkedIn session cookies loaded successfully ({len(self.cookies)} cookies)")
        return True

    async def prepare(self, page: Page) -> None:
        """Pre-navigation hook: delay, headers, stealth script, cookies."""
        await self.random_delay()

        try:
            await page.set_extra_http_headers(self.build_headers())
        except Exception as e:
            logger.warning(f"Could not set request headers: {e}")

        try:
            await page.add_init_script(STEALTH_INIT_JS)
        except Exception as e:
            logger.warning(f"Could not add stealth init script: {e}")

        try:
            await self.inject_cookies(page.context)
        except Exception as e:
            logger.warning(f"Could not inject session cookies: {e}")
