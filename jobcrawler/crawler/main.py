"""
Crawl entry point.

run_crawl() validates the run input, then wires configuration, logging,
persistence, the browser, the session manager, the classifier, the router
and the controller, and runs the crawl to completion.

Example:
    >>> import asyncio
    >>> from jobcrawler.crawler.main import run_crawl
    >>> stats = asyncio.run(run_crawl({
    ...     "search_queries": ["python developer"],
    ...     "location": "Berlin",
    ...     "max_results": 25,
    ... }))
"""

from typing import Any, Dict, Optional, Union

from jobcrawler.core.config import Config, CrawlInput, get_config, validate_config
from jobcrawler.core.logging import get_logger, init_crawler_logging
from jobcrawler.crawler.browser import BrowserPool
from jobcrawler.crawler.classifier import BlockClassifier
from jobcrawler.crawler.controller import CrawlController, CrawlPolicy, PageProvider
from jobcrawler.crawler.frontier import InMemoryFrontier
from jobcrawler.crawler.router import JobHandlers, RecordTransform, build_seed_requests
from jobcrawler.crawler.session import SessionManager
from jobcrawler.crawler.stats import RunStats
from jobcrawler.db.storage import DatasetSink, FanOutRecordSink, KeyValueStore, RecordSink, SideChannelStore
from jobcrawler.db.supabase_client import SupabaseRecordSink

logger = get_logger(__name__)


def log_start_banner(crawl_input: CrawlInput) -> None:
    logger.info("Starting LinkedIn Jobs Scraper...")
    if crawl_input.uses_search_urls:
        logger.info(f"Search URLs: {', '.join(crawl_input.search_urls)}")
    else:
        logger.info(f"Search queries: {', '.join(crawl_input.search_queries)}")
        logger.info(f"Location: {crawl_input.location}")
    logger.info(f"Max results: {crawl_input.max_results}")
    logger.info(f"Concurrency: {crawl_input.effective_concurrency} (requested {crawl_input.max_concurrency})")
    if crawl_input.debug_mode:
        logger.info("Debug mode: ON")


def default_record_sink(config: Config) -> RecordSink:
    """Local JSON Lines dataset, fanned out to Supabase when it is enabled."""
    dataset = DatasetSink(config.base_out_dir)
    supabase_sink = SupabaseRecordSink.from_config(config)
    if supabase_sink is None:
        return dataset
    return FanOutRecordSink(dataset, supabase_sink)


async def run_crawl(
    crawl_input: Union[CrawlInput, Dict[str, Any]],
    *,
    transform: Optional[RecordTransform] = None,
    record_sink: Optional[RecordSink] = None,
    store: Optional[SideChannelStore] = None,
    config: Optional[Config] = None,
    page_provider: Optional[PageProvider] = None,
) -> RunStats:
    """
    Run one crawl and return its statistics.

    Args:
        crawl_input: Validated CrawlInput or the raw input dict
        transform: Optional record post-processor (sync or async)
        record_sink: Destination for job records (default: dataset under BASE_OUT_DIR)
        store: Side-channel store (default: key-value files under BASE_OUT_DIR)
        config: Environment configuration (default: get_config())
        page_provider: Source of pages (default: a Chromium BrowserPool)

    Raises:
        InputValidationError: If the input is invalid; nothing is navigated
    """
    if not isinstance(crawl_input, CrawlInput):
        crawl_input = CrawlInput.from_dict(crawl_input)

    if config is None:
        validate_config()
        config = get_config()
    else:
        config.validate()
    init_crawler_logging(debug=crawl_input.debug_mode, log_dir=config.log_dir, level=config.log_level)

    log_start_banner(crawl_input)

    record_sink = record_sink or default_record_sink(config)
    store = store or KeyValueStore(config.base_out_dir)

    stats = RunStats()
    frontier = InMemoryFrontier()
    classifier = BlockClassifier(stats)
    session = SessionManager(
        cookies_payload=crawl_input.session_cookies,
        min_delay_ms=crawl_input.min_delay_ms,
        max_delay_ms=crawl_input.max_delay_ms,
        debug=crawl_input.debug_mode,
    )
    handlers = JobHandlers(
        frontier=frontier,
        record_sink=record_sink,
        store=store,
        stats=stats,
        classifier=classifier,
        max_results=crawl_input.max_results,
        max_pages_per_search=crawl_input.max_pages_per_search or config.max_pages_per_search,
        custom_data=crawl_input.custom_data,
        transform=transform,
        debug_mode=crawl_input.debug_mode,
    )
    policy = CrawlPolicy(
        max_request_retries=config.max_request_retries,
        handler_timeout_s=config.handler_timeout_s,
        nav_timeout_ms=config.nav_timeout_ms,
        concurrency=crawl_input.effective_concurrency,
    )

    seeds = build_seed_requests(crawl_input)

    if page_provider is not None:
        controller = CrawlController(
            handlers.build_router(), frontier, page_provider, session, classifier, stats, store, policy
        )
        return await controller.run(seeds)

    proxy = crawl_input.proxy.to_playwright() or config.proxy()
    async with BrowserPool(headless=config.headless, proxy=proxy) as pool:
        controller = CrawlController(
            handlers.build_router(), frontier, pool, session, classifier, stats, store, policy
        )
        return await controller.run(seeds)
