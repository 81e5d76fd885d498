"""
In-memory stand-ins for the Playwright objects the crawler talks to.

Selectors are matched literally against dict keys, so a test states
exactly which selector of a fallback chain is present on the page.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError


class FakeElement:
    """Element handle with text, attributes and nested elements."""

    def __init__(
        self,
        text: Optional[str] = "",
        attrs: Optional[Dict[str, str]] = None,
        children: Optional[Dict[str, List["FakeElement"]]] = None,
        fail: bool = False,
    ):
        self.text = text
        self.attrs = attrs or {}
        self.children = children or {}
        self.fail = fail

    async def text_content(self) -> Optional[str]:
        if self.fail:
            raise PlaywrightError("Element is not attached to the DOM")
        return self.text

    async def get_attribute(self, name: str) -> Optional[str]:
        if self.fail:
            raise PlaywrightError("Element is not attached to the DOM")
        return self.attrs.get(name)

    async def query_selector_all(self, selector: str) -> List["FakeElement"]:
        return list(self.children.get(selector, []))

    async def query_selector(self, selector: str) -> Optional["FakeElement"]:
        matches = self.children.get(selector, [])
        return matches[0] if matches else None


def link(href: str, text: str = "") -> FakeElement:
    return FakeElement(text=text, attrs={"href": href})


class FakeContext:
    """Browser context that records injected cookies."""

    def __init__(self):
        self.cookies: List[Dict[str, Any]] = []
        self.add_cookies_calls = 0

    async def add_cookies(self, cookies: List[Dict[str, Any]]) -> None:
        self.add_cookies_calls += 1
        self.cookies.extend(cookies)


@dataclass
class FakeSitePage:
    """What a URL renders to when a FakePage navigates to it."""
    elements: Dict[str, List[FakeElement]] = field(default_factory=dict)
    body_text: str = ""
    title: str = ""
    final_url: Optional[str] = None
    error: Optional[Exception] = None
    # Raise `error` this many times, then render normally (None: always)
    fail_times: Optional[int] = None


class FakePage:
    """
    Page stand-in keyed by selector strings.

    Selectors are matched literally against the `elements` mapping; a
    selector with no entry matches nothing. With a `site`, goto() loads
    the FakeSitePage registered for the URL.
    """

    def __init__(
        self,
        url: str = "about:blank",
        elements: Optional[Dict[str, List[FakeElement]]] = None,
        body_text: str = "",
        title: str = "",
        context: Optional[FakeContext] = None,
        site: Optional[Dict[str, FakeSitePage]] = None,
    ):
        self.url = url
        self.elements = elements or {}
        self.body_text = body_text
        self._title = title
        self.context = context or FakeContext()
        self.site = site
        self.navigations: List[str] = []
        self.extra_headers: Dict[str, str] = {}
        self.init_scripts: List[str] = []
        self.evaluated: List[str] = []
        self.waited_ms: List[int] = []
        self.screenshots = 0

    async def goto(self, url: str, wait_until: Optional[str] = None, timeout: Optional[float] = None):
        self.navigations.append(url)
        if self.site is None:
            self.url = url
            return None
        site_page = self.site.get(url)
        if site_page is None:
            raise PlaywrightError(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        if site_page.error is not None and (site_page.fail_times is None or site_page.fail_times > 0):
            if site_page.fail_times is not None:
                site_page.fail_times -= 1
            raise site_page.error
        self.elements = site_page.elements
        self.body_text = site_page.body_text
        self._title = site_page.title
        self.url = site_page.final_url or url
        return None

    async def query_selector_all(self, selector: str) -> List[FakeElement]:
        return list(self.elements.get(selector, []))

    async def query_selector(self, selector: str) -> Optional[FakeElement]:
        matches = self.elements.get(selector, [])
        return matches[0] if matches else None

    async def wait_for_selector(self, selector: str, timeout: Optional[float] = None, state: Optional[str] = None):
        matches = self.elements.get(selector, [])
        if not matches:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")
        return matches[0]

    async def text_content(self, selector: str) -> Optional[str]:
        if selector == "body":
            return self.body_text
        matches = self.elements.get(selector, [])
        return matches[0].text if matches else None

    async def title(self) -> str:
        return self._title

    async def evaluate(self, script: str) -> None:
        self.evaluated.append(script)

    async def wait_for_timeout(self, timeout_ms: int) -> None:
        self.waited_ms.append(timeout_ms)

    async def screenshot(self, full_page: bool = False) -> bytes:
        self.screenshots += 1
        return b"\x89PNG\r\n\x1a\nfake"

    async def set_extra_http_headers(self, headers: Dict[str, str]) -> None:
        self.extra_headers = dict(headers)

    async def add_init_script(self, script: str) -> None:
        self.init_scripts.append(script)


class FakePageProvider:
    """Opens FakePages against a shared site map, one context per page."""

    def __init__(self, site: Dict[str, FakeSitePage]):
        self.site = site
        self.pages: List[FakePage] = []
        self.closed = 0

    @asynccontextmanager
    async def open_page(self):
        page = FakePage(context=FakeContext(), site=self.site)
        self.pages.append(page)
        try:
            yield page
        finally:
            self.closed += 1

    def navigations(self) -> List[str]:
        return [url for page in self.pages for url in page.navigations]

