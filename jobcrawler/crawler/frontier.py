"""
Crawl requests and the frontier (queue of requests still to process).

The frontier deduplicates on each request's unique key: a URL that has
been added once is never added again, with the exception of reclaim(),
which puts a failed request back for another attempt.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, Dict, Optional, Protocol, Set

from jobcrawler.core.logging import get_logger
from jobcrawler.crawler.url_utils import unique_key

logger = get_logger(__name__)


class RequestKind(str, Enum):
    """Request labels; each maps to one router handler."""
    SEARCH = "SEARCH"
    JOB_DETAIL = "JOB_DETAIL"


@dataclass
class CrawlRequest:
    """
    A URL to visit plus the routing metadata its handler needs.

    Provenance: search_query/location in query mode, search_url in URL mode.
    page_index counts search result pages from 0 for the pagination ceiling.
    Only retry_count changes after creation.
    """

    url: str
    kind: RequestKind
    search_query: Optional[str] = None
    location: Optional[str] = None
    search_url: Optional[str] = None
    page_index: int = 0
    retry_count: int = 0
    unique_key: str = field(default="")

    def __post_init__(self):
        self.kind = RequestKind(self.kind)
        if not self.unique_key:
            self.unique_key = unique_key(self.url, drop_query=self.kind is RequestKind.JOB_DETAIL)

    @property
    def label(self) -> str:
        return self.kind.value

    def provenance(self) -> Dict[str, Optional[str]]:
        """Routing context carried forward to derived requests and records."""
        return {
            "search_query": self.search_query,
            "location": self.location,
            "search_url": self.search_url,
        }


class Frontier(Protocol):
    async def add(self, request: CrawlRequest) -> bool:
        ...

    async def fetch_next(self) -> Optional[CrawlRequest]:
        ...

    async def reclaim(self, request: CrawlRequest) -> None:
        ...

    async def mark_handled(self, request: CrawlRequest) -> None:
        ...

    async def is_finished(self) -> bool:
        ...


class InMemoryFrontier:
    """
    FIFO frontier held in memory.

    Safe for many workers on one event loop: no method awaits while it
    holds intermediate state.
    """

    def __init__(self):
        self._pending: Deque[CrawlRequest] = deque()
        self._seen: Set[str] = set()
        self._in_progress: Dict[str, CrawlRequest] = {}
        self.handled_count = 0

    async def add(self, request: CrawlRequest) -> bool:
        """Queue a request; returns False if its unique key was already seen."""
        if request.unique_key in self._seen:
            logger.debug(f"[frontier] duplicate skipped: {request.url}")
            return False
        self._seen.add(request.unique_key)
        self._pending.append(request)
        return True

    async def fetch_next(self) -> Optional[CrawlRequest]:
        if not self._pending:
            return None
        request = self._pending.popleft()
        self._in_progress[request.unique_key] = request
        return request

    async def reclaim(self, request: CrawlRequest) -> None:
        """Return an in-flight request to the back of the queue for a retry."""
        self._in_progress.pop(request.unique_key, None)
        self._pending.append(request)

    async def mark_handled(self, request: CrawlRequest) -> None:
        """Finish a request (succeeded or permanently failed)."""
        self._in_progress.pop(request.unique_key, None)
        self.handled_count += 1

    async def is_finished(self) -> bool:
        return not self._pending and not self._in_progress

    def __len__(self) -> int:
        return len(self._pending)
