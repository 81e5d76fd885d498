"""
Crawl controller: worker pool, per-request lifecycle and failure handling.

Each attempt runs in a fresh page:
    session.prepare -> page.goto -> classifier.inspect -> router.dispatch

A failed attempt increments the error counter exactly once. The request is
reclaimed while its retry budget lasts; after that one FailedRequestRecord
is stored and the crawl moves on. Only orchestration errors abort the run.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import AsyncContextManager, Iterable, Optional, Protocol

from playwright.async_api import Page

from jobcrawler.core.config import MAX_CONCURRENCY_CAP
from jobcrawler.core.error_models import FailedRequestRecord, classify_exception
from jobcrawler.core.errors import RequestTimeoutError
from jobcrawler.core.logging import get_logger
from jobcrawler.crawler.classifier import BlockClassifier
from jobcrawler.crawler.frontier import CrawlRequest, Frontier
from jobcrawler.crawler.router import CrawlContext, Router
from jobcrawler.crawler.session import SessionManager
from jobcrawler.crawler.stats import RunStats
from jobcrawler.db.storage import SideChannelStore

logger = get_logger(__name__)

FAILED_REQUEST_KEY_PREFIX = "failed-url-"
FINAL_STATS_KEY = "final-stats"
FATAL_ERROR_KEY = "fatal-error"


class PageProvider(Protocol):
    def open_page(self) -> AsyncContextManager[Page]:
        ...


@dataclass
class CrawlPolicy:
    """Limits applied to every request of a run."""
    max_request_retries: int = 5
    handler_timeout_s: float = 90.0
    nav_timeout_ms: int = 60_000
    concurrency: int = 2
    idle_poll_s: float = 0.1

    @property
    def worker_count(self) -> int:
        return max(1, min(self.concurrency, MAX_CONCURRENCY_CAP))


class CrawlController:
    """
    Drives a frontier to completion with a small pool of workers.

    Example:
        >>> controller = CrawlController(router, frontier, pool, session, classifier, stats, store)
        >>> stats = await controller.run(build_seed_requests(crawl_input))
    """

    def __init__(
        self,
        router: Router,
        frontier: Frontier,
        page_provider: PageProvider,
        session: SessionManager,
        classifier: BlockClassifier,
        stats: RunStats,
        store: SideChannelStore,
        policy: Optional[CrawlPolicy] = None,
    ):
        self.router = router
        self.frontier = frontier
        self.page_provider = page_provider
        self.session = session
        self.classifier = classifier
        self.stats = stats
        self.store = store
        self.policy = policy or CrawlPolicy()
        self._last_failure_ns = 0

    async def run(self, seed_requests: Iterable[CrawlRequest]) -> RunStats:
        """
        Crawl until the frontier is exhausted.

        Raises:
            Exception: Any orchestration error, after the fatal-error
                snapshot has been stored
        """
        try:
            seeded = 0
            for request in seed_requests:
                if await self.frontier.add(request):
                    seeded += 1
            logger.info(f"Starting crawl: {seeded} seed request(s), {self.policy.worker_count} worker(s)")

            workers = [
                asyncio.create_task(self._worker(i), name=f"crawl-worker-{i}")
                for i in range(self.policy.worker_count)
            ]
            try:
                await asyncio.gather(*workers)
            finally:
                for task in workers:
                    if not task.done():
                        task.cancel()
                await asyncio.gather(*workers, return_exceptions=True)
        except Exception as e:
            logger.error(f"Fatal error: {e}")
            self.stats.finish()
            try:
                await self.store.set_value(FATAL_ERROR_KEY, self.stats.to_fatal_dict(e))
            except Exception as store_error:
                logger.error(f"Could not store fatal-error snapshot: {store_error}")
            raise

        self.stats.finish()
        logger.info("\n" + self.stats.render_report())
        await self.store.set_value(FINAL_STATS_KEY, self.stats.to_dict())
        return self.stats

    async def _worker(self, worker_id: int) -> None:
        while True:
            request = await self.frontier.fetch_next()
            if request is None:
                if await self.frontier.is_finished():
                    logger.debug(f"[worker {worker_id}] frontier finished")
                    return
                await asyncio.sleep(self.policy.idle_poll_s)
                continue
            await self.process(request)

    async def process(self, request: CrawlRequest) -> bool:
        """Run one attempt and settle the request; returns True on success."""
        try:
            await self.attempt(request)
        except Exception as error:
            await self.handle_failure(request, error)
            return False
        await self.frontier.mark_handled(request)
        return True

    async def attempt(self, request: CrawlRequest) -> None:
        async with self.page_provider.open_page() as page:
            await self.session.prepare(page)
            await page.goto(request.url, wait_until="domcontentloaded", timeout=self.policy.nav_timeout_ms)
            await self.classifier.inspect(page)

            ctx = CrawlContext(page=page, request=request)
            try:
                await asyncio.wait_for(self.router.dispatch(ctx), timeout=self.policy.handler_timeout_s)
            except asyncio.TimeoutError as e:
                raise RequestTimeoutError(request.url, self.policy.handler_timeout_s) from e

    async def handle_failure(self, request: CrawlRequest, error: Exception) -> None:
        """
        Count the failed attempt, then retry or give up on the request.
        """
        self.stats.errors += 1
        self.classifier.classify_failure(error)
        kind = classify_exception(error)

        if request.retry_count < self.policy.max_request_retries:
            request.retry_count += 1
            self.stats.requests_retried += 1
            logger.warning(
                f"[{request.label}] Attempt {request.retry_count} failed ({kind.value}): {error} "
                f"- retrying {request.url}"
            )
            await self.frontier.reclaim(request)
            return

        logger.error(f"Request {request.url} failed after {request.retry_count + 1} attempt(s): {error}")
        self.stats.requests_failed += 1
        try:
            record = FailedRequestRecord.from_exception(
                error,
                url=request.url,
                label=request.label,
                retry_count=request.retry_count,
                metadata={**request.provenance(), "page_index": request.page_index},
            )
            await self.store.set_value(self._failure_key(), record.model_dump())
        except Exception as e:
            logger.error(f"Could not store failed request {request.url}: {e}")
        await self.frontier.mark_handled(request)

    def _failure_key(self) -> str:
        # Strictly increasing even when the clock has coarse resolution
        now = max(time.monotonic_ns(), self._last_failure_ns + 1)
        self._last_failure_ns = now
        return f"{FAILED_REQUEST_KEY_PREFIX}{now}"
