"""
DOM field extraction with selector-fallback chains.

The extractor never raises: a selector that is missing, invalid or whose
element detached mid-read counts as a miss and the next candidate is
tried. Callers get "" / [] when nothing matched.
"""

from typing import Any, Dict, List, Optional, Sequence, Union
from urllib.parse import urljoin

from playwright.async_api import Page

from jobcrawler.core.logging import get_logger
from jobcrawler.crawler.schema import DEFAULT_SCHEMA, ExtractionSchema

logger = get_logger(__name__)

Candidates = Union[str, Sequence[str]]


def as_candidates(candidates: Candidates) -> List[str]:
    """Accept a single selector or an ordered list of selectors."""
    if isinstance(candidates, str):
        return [candidates]
    return [c for c in candidates if c]


async def _element_text(el) -> str:
    try:
        return ((await el.text_content()) or "").strip()
    except Exception:
        return ""


async def _first_text_in(root, candidates: Candidates) -> str:
    """First non-empty trimmed text under root (a page or an element)."""
    for sel in as_candidates(candidates):
        try:
            elements = await root.query_selector_all(sel)
        except Exception as e:
            logger.debug(f"selector {sel!r} failed: {e}")
            continue
        for el in elements:
            text = await _element_text(el)
            if text:
                return text
    return ""


async def _first_href_in(root, candidates: Candidates, base_url: str) -> str:
    for sel in as_candidates(candidates):
        try:
            el = await root.query_selector(sel)
            href = await el.get_attribute("href") if el else None
        except Exception:
            continue
        if href:
            return urljoin(base_url, href.strip())
    return ""


class FieldExtractor:
    """
    Pulls the job schema off a rendered page.

    Example:
        >>> extractor = FieldExtractor(page)
        >>> await extractor.get_text(['[data-test="top-card-title"]', "h1.topcard__title"])
        'Senior Data Engineer'
    """

    def __init__(self, page: Page, schema: Optional[ExtractionSchema] = None):
        self.page = page
        self.schema = schema or DEFAULT_SCHEMA

    async def get_text(self, candidates: Candidates) -> str:
        """
        Trimmed text of the first candidate with a non-empty match.

        Returns "" if every candidate misses.
        """
        return await _first_text_in(self.page, candidates)

    async def get_all_text(self, candidates: Candidates) -> List[str]:
        """
        Trimmed, non-empty texts of the first candidate that matches anything.

        Returns [] if every candidate misses.
        """
        for sel in as_candidates(candidates):
            try:
                elements = await self.page.query_selector_all(sel)
            except Exception as e:
                logger.debug(f"selector {sel!r} failed: {e}")
                continue
            if not elements:
                continue
            texts = []
            for el in elements:
                text = await _element_text(el)
                if text:
                    texts.append(text)
            return texts
        return []

    async def get_hrefs(self, candidates: Candidates) -> List[str]:
        """
        Absolute hrefs of the first candidate that matches at least one anchor.

        Order follows the document; duplicates are left to the caller.
        """
        for sel in as_candidates(candidates):
            try:
                elements = await self.page.query_selector_all(sel)
            except Exception as e:
                logger.debug(f"selector {sel!r} failed: {e}")
                continue
            hrefs = []
            for el in elements:
                try:
                    href = await el.get_attribute("href")
                except Exception:
                    continue
                if href and href.strip():
                    hrefs.append(urljoin(self.page.url, href.strip()))
            if hrefs:
                return hrefs
        return []

    async def extract_fields(self) -> Dict[str, Any]:
        """
        Every schema field as text ("" when missing) plus the criteria list.
        """
        data: Dict[str, Any] = {}
        for name, candidates in self.schema.fields.items():
            data[name] = await self.get_text(candidates)
        data["job_criteria"] = await self.get_all_text(self.schema.criteria)
        return data

    async def extract_hiring_team(self) -> List[Dict[str, str]]:
        """
        Hiring team as [{name, title, profile_url}], possibly empty.

        Tries the dedicated profile cards first; if none are found, falls
        back to any list item in the hiring-team section that holds a link,
        giving it the default title.
        """
        ht = self.schema.hiring_team
        team: List[Dict[str, str]] = []
        try:
            for card in await self.page.query_selector_all(ht.card_selector):
                team.append({
                    "name": await _first_text_in(card, ht.name) or ht.unknown,
                    "title": await _first_text_in(card, ht.title) or ht.unknown,
                    "profile_url": await _first_href_in(card, ht.profile_link, self.page.url),
                })

            if not team:
                for item in await self.page.query_selector_all(ht.fallback_selector):
                    link = await item.query_selector("a")
                    if link is None:
                        continue
                    href = await link.get_attribute("href")
                    team.append({
                        "name": await _element_text(link),
                        "title": ht.fallback_title,
                        "profile_url": urljoin(self.page.url, href.strip()) if href else "",
                    })
        except Exception as e:
            logger.warning(f"Hiring team extraction failed on {self.page.url}: {e}")
        return team
