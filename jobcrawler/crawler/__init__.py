"""
Crawler engine for LinkedIn guest job search.

Module Structure:
- url_utils: URL building, canonicalization and dedupe keys
- schema: versioned selector chains for every extracted field
- frontier: crawl requests and the deduplicating request queue
- stats: run counters and the end-of-run report
- extractor: selector-fallback field extraction (requires playwright)
- page_analyzer: bounded waits, scrolling, diagnostics (requires playwright)
- session: user agents, headers, stealth script, cookies (requires playwright)
- classifier: block and site-error detection (requires playwright)
- router: SEARCH / JOB_DETAIL handlers (requires playwright)
- controller: worker pool, retries, failure records (requires playwright)
- browser: Chromium launch and page contexts (requires playwright)
- main: run_crawl entry point (requires playwright)
"""

import importlib

# Export pure modules directly (no playwright dependency)
from jobcrawler.crawler.url_utils import (
    build_search_url,
    canon_url,
    normalize_url,
    resolve_url,
    unique_key,
)
from jobcrawler.crawler.schema import (
    DEFAULT_SCHEMA,
    LINKEDIN_GUEST_V1,
    ExtractionSchema,
    HiringTeamSchema,
)
from jobcrawler.crawler.frontier import (
    CrawlRequest,
    InMemoryFrontier,
    RequestKind,
)
from jobcrawler.crawler.stats import RunStats


_LAZY_EXPORTS = {
    "FieldExtractor": "jobcrawler.crawler.extractor",
    "SessionManager": "jobcrawler.crawler.session",
    "load_session_cookies": "jobcrawler.crawler.session",
    "BlockClassifier": "jobcrawler.crawler.classifier",
    "Router": "jobcrawler.crawler.router",
    "JobHandlers": "jobcrawler.crawler.router",
    "build_seed_requests": "jobcrawler.crawler.router",
    "CrawlController": "jobcrawler.crawler.controller",
    "CrawlPolicy": "jobcrawler.crawler.controller",
    "BrowserPool": "jobcrawler.crawler.browser",
    "run_crawl": "jobcrawler.crawler.main",
}


# Lazy loading for playwright-dependent names
def __getattr__(name):
    """Lazy loading for playwright-dependent names."""
    module_name = _LAZY_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    return getattr(importlib.import_module(module_name), name)


__all__ = [
    # URL utilities (no playwright dependency)
    "build_search_url",
    "canon_url",
    "normalize_url",
    "resolve_url",
    "unique_key",
    # Schema
    "DEFAULT_SCHEMA",
    "LINKEDIN_GUEST_V1",
    "ExtractionSchema",
    "HiringTeamSchema",
    # Frontier / stats
    "CrawlRequest",
    "InMemoryFrontier",
    "RequestKind",
    "RunStats",
    # Require playwright (lazy loaded)
    *_LAZY_EXPORTS,
]
