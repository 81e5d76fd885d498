"""
Request routing and the SEARCH / JOB_DETAIL handlers.

SEARCH pages yield job-detail links and, while the result target is not
reached, the next results page. JOB_DETAIL pages yield one JobRecord each.
Handlers log and re-raise any error so the controller can retry the
request; wait timeouts and diagnostics never count as errors.
"""

import copy
import inspect
import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from playwright.async_api import Page

from jobcrawler.core.config import CrawlInput
from jobcrawler.core.logging import get_logger
from jobcrawler.crawler.classifier import BlockClassifier
from jobcrawler.crawler.extractor import FieldExtractor
from jobcrawler.crawler.frontier import CrawlRequest, Frontier, RequestKind
from jobcrawler.crawler.page_analyzer import (
    count_listings,
    page_diagnostics,
    scroll_and_settle,
    wait_for_ready,
)
from jobcrawler.crawler.schema import (
    DEFAULT_SCHEMA,
    DETAIL_READY_TIMEOUT_MS,
    SCROLL_SETTLE_MS,
    SEARCH_READY_TIMEOUT_MS,
    ExtractionSchema,
)
from jobcrawler.crawler.stats import RunStats
from jobcrawler.crawler.url_utils import JOB_LINK_PARAMS, build_search_url, canon_url, resolve_url
from jobcrawler.db.models import JobRecord
from jobcrawler.db.storage import RecordSink, SideChannelStore

logger = get_logger(__name__)

# (record, page, request) -> replacement record, or None to keep the original
RecordTransform = Callable[
    [Dict[str, Any], Page, CrawlRequest],
    Union[Optional[Dict[str, Any]], Awaitable[Optional[Dict[str, Any]]]],
]

DEFAULT_MAX_PAGES_PER_SEARCH = 40


@dataclass
class CrawlContext:
    """What a handler gets: the navigated page and the request behind it."""
    page: Page
    request: CrawlRequest


Handler = Callable[[CrawlContext], Awaitable[None]]


class Router:
    """Dispatches each request to the handler registered for its kind."""

    def __init__(self):
        self._handlers: Dict[RequestKind, Handler] = {}

    def add_handler(self, kind: RequestKind, handler: Handler) -> None:
        self._handlers[RequestKind(kind)] = handler

    def handler_for(self, kind: RequestKind) -> Handler:
        try:
            return self._handlers[RequestKind(kind)]
        except KeyError:
            raise LookupError(f"No handler registered for request kind {kind!r}") from None

    async def dispatch(self, ctx: CrawlContext) -> None:
        await self.handler_for(ctx.request.kind)(ctx)


def build_seed_requests(crawl_input: CrawlInput) -> List[CrawlRequest]:
    """
    One SEARCH request per search URL, or per non-blank query in query mode.

    URL mode uses each search URL as given; query mode renders one search
    URL per query for the configured location.
    """
    if crawl_input.uses_search_urls:
        return [
            CrawlRequest(url=url, kind=RequestKind.SEARCH, search_url=url)
            for url in crawl_input.search_urls
        ]
    return [
        CrawlRequest(
            url=build_search_url(query, crawl_input.location),
            kind=RequestKind.SEARCH,
            search_query=query,
            location=crawl_input.location,
        )
        for query in crawl_input.search_queries
        if query and query.strip()
    ]


class JobHandlers:
    """
    The two request handlers and the state they share.

    Example:
        >>> handlers = JobHandlers(frontier, sink, store, stats, classifier, max_results=50)
        >>> router = handlers.build_router()
    """

    def __init__(
        self,
        frontier: Frontier,
        record_sink: RecordSink,
        store: SideChannelStore,
        stats: RunStats,
        classifier: BlockClassifier,
        max_results: int = 100,
        max_pages_per_search: int = DEFAULT_MAX_PAGES_PER_SEARCH,
        custom_data: Optional[Dict[str, Any]] = None,
        transform: Optional[RecordTransform] = None,
        debug_mode: bool = False,
        schema: Optional[ExtractionSchema] = None,
    ):
        self.frontier = frontier
        self.record_sink = record_sink
        self.store = store
        self.stats = stats
        self.classifier = classifier
        self.max_results = max_results
        self.max_pages_per_search = max_pages_per_search
        self.custom_data = dict(custom_data or {})
        self.transform = transform
        self.debug_mode = debug_mode
        self.schema = schema or DEFAULT_SCHEMA
        self._screenshots = 0

    def build_router(self) -> Router:
        router = Router()
        router.add_handler(RequestKind.SEARCH, self.handle_search)
        router.add_handler(RequestKind.JOB_DETAIL, self.handle_detail)
        return router

    # ------------------------------------------------------------------
    # SEARCH
    # ------------------------------------------------------------------
    async def handle_search(self, ctx: CrawlContext) -> None:
        page, request = ctx.page, ctx.request
        logger.info(f"[SEARCH] Processing: {request.url}")

        try:
            if not await wait_for_ready(page, self.schema.listing_card, SEARCH_READY_TIMEOUT_MS):
                logger.warning("[SEARCH] Search results container not found, page may be blocked")

            job_count = await count_listings(page, self.schema.listing_card)
            self.stats.jobs_found += job_count
            logger.info(f"[SEARCH] Found {job_count} job listings on this page")

            if job_count == 0 and await self._diagnose_empty_page(page):
                logger.warning("[SEARCH] Sign-in wall instead of results, skipping links on this page")
                return

            queued = await self.enqueue_job_links(page, request)
            logger.info(f"[SEARCH] Queued {queued} job detail pages")

            await self.enqueue_next_page(page, request)
        except Exception as e:
            logger.error(f"[SEARCH] Error processing search page: {e}")
            raise

    async def _diagnose_empty_page(self, page: Page) -> bool:
        """Log diagnostics for a page with no cards; True if it is a sign-in wall."""
        blocked = False
        try:
            info = await page_diagnostics(page, self.schema)
            logger.warning(f"[DEBUG] Page Info: {json.dumps(info, indent=2, ensure_ascii=False)}")
            blocked = self.classifier.check_diagnostics(info)

            if self.debug_mode:
                screenshot = await page.screenshot(full_page=False)
                self._screenshots += 1
                await self.store.set_value(
                    f"blocked-page-screenshot-{self._screenshots}", screenshot, content_type="image/png"
                )
        except Exception as e:
            logger.warning(f"[SEARCH] Diagnostic capture failed: {e}")
        return blocked

    async def enqueue_job_links(self, page: Page, request: CrawlRequest) -> int:
        """
        Queue one JOB_DETAIL request per distinct job link on the page.

        Uses the first link selector that matches anything.
        """
        extractor = FieldExtractor(page, self.schema)
        urls: Dict[str, None] = {}
        for href in await extractor.get_hrefs(self.schema.job_links):
            url = canon_url(page.url, href, drop_params=JOB_LINK_PARAMS)
            if url:
                urls.setdefault(url, None)

        queued = 0
        for url in urls:
            detail = CrawlRequest(url=url, kind=RequestKind.JOB_DETAIL, **request.provenance())
            if await self.frontier.add(detail):
                queued += 1
        return queued

    async def enqueue_next_page(self, page: Page, request: CrawlRequest) -> bool:
        """
        Queue the next results page if there is one and more results are wanted.

        Stops when the control is absent, when jobs_scraped reached
        max_results, or when the page-depth ceiling is hit.
        """
        extractor = FieldExtractor(page, self.schema)
        hrefs = await extractor.get_hrefs(self.schema.next_page)
        next_url = resolve_url(page.url, hrefs[0]) if hrefs else None

        if not next_url:
            logger.info("[SEARCH] No next page")
            return False
        if self.stats.jobs_scraped >= self.max_results:
            logger.info(f"[SEARCH] Result target reached ({self.stats.jobs_scraped}/{self.max_results}), not paginating")
            return False
        if request.page_index + 1 >= self.max_pages_per_search:
            logger.warning(f"[SEARCH] Page ceiling reached ({self.max_pages_per_search}), not paginating")
            return False

        next_request = CrawlRequest(
            url=next_url,
            kind=RequestKind.SEARCH,
            page_index=request.page_index + 1,
            **request.provenance(),
        )
        if await self.frontier.add(next_request):
            logger.info("[SEARCH] Next page queued")
            return True
        logger.info(f"[SEARCH] Next page already seen, not paginating: {next_url}")
        return False

    # ------------------------------------------------------------------
    # JOB_DETAIL
    # ------------------------------------------------------------------
    async def handle_detail(self, ctx: CrawlContext) -> None:
        page, request = ctx.page, ctx.request
        logger.info(f"[JOB_DETAIL] Processing: {request.url}")

        try:
            if not await wait_for_ready(page, self.schema.detail_ready, DETAIL_READY_TIMEOUT_MS):
                logger.warning("[JOB_DETAIL] Job title element not found")

            await scroll_and_settle(page, SCROLL_SETTLE_MS)

            extractor = FieldExtractor(page, self.schema)
            fields = await extractor.extract_fields()
            hiring_team = await extractor.extract_hiring_team()

            record = self.build_record(request, fields, hiring_team)
            output = await self.apply_transform(record, page, request)

            await self.record_sink.push(output)
            self.stats.jobs_scraped += 1
            logger.info(f"[JOB_DETAIL] ✓ Scraped: {record['title']} at {record['company']}")
        except Exception as e:
            logger.error(f"[JOB_DETAIL] Error scraping job details: {e}")
            raise

    def build_record(
        self,
        request: CrawlRequest,
        fields: Dict[str, Any],
        hiring_team: List[Dict[str, str]],
    ) -> Dict[str, Any]:
        if request.search_url:
            provenance = {"search_url": request.search_url}
        else:
            provenance = {"search_query": request.search_query, "location_filter": request.location}

        record = JobRecord(
            url=request.url,
            hiring_team=hiring_team,
            custom_data=copy.deepcopy(self.custom_data),
            **fields,
            **provenance,
        )
        return record.to_output()

    async def apply_transform(self, record: Dict[str, Any], page: Page, request: CrawlRequest) -> Dict[str, Any]:
        """
        Run the registered transform on the record.

        In-place edits count when the transform returns None. If it raises,
        the record as it was before the transform is used.
        """
        if self.transform is None:
            return record
        backup = copy.deepcopy(record)
        try:
            result = self.transform(record, page, request)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.error(f"Error in record transform: {e}")
            return backup
        return result if result is not None else record
