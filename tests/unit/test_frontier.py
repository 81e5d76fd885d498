"""
Unit tests for crawl requests, the frontier and seeding.
"""

import asyncio

import pytest

from jobcrawler.core.config import CrawlInput
from jobcrawler.crawler.frontier import CrawlRequest, InMemoryFrontier, RequestKind
from jobcrawler.crawler.router import build_seed_requests


def run(coro):
    return asyncio.run(coro)


class TestCrawlRequest:
    def test_detail_key_ignores_query(self):
        a = CrawlRequest(url="https://www.linkedin.com/jobs/view/9?refId=1", kind=RequestKind.JOB_DETAIL)
        b = CrawlRequest(url="https://www.linkedin.com/jobs/view/9?refId=2", kind="JOB_DETAIL")
        assert a.unique_key == b.unique_key
        assert b.kind is RequestKind.JOB_DETAIL

    def test_search_key_keeps_query(self):
        a = CrawlRequest(url="https://www.linkedin.com/jobs/search/?keywords=a", kind=RequestKind.SEARCH)
        b = CrawlRequest(url="https://www.linkedin.com/jobs/search/?keywords=b", kind=RequestKind.SEARCH)
        assert a.unique_key != b.unique_key

    def test_label_and_provenance(self):
        request = CrawlRequest(
            url="https://www.linkedin.com/jobs/search/?keywords=a",
            kind=RequestKind.SEARCH,
            search_query="a",
            location="Berlin",
        )
        assert request.label == "SEARCH"
        assert request.provenance() == {"search_query": "a", "location": "Berlin", "search_url": None}

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            CrawlRequest(url="https://x", kind="PROFILE")


class TestInMemoryFrontier:
    """Tests for InMemoryFrontier."""

    def test_dedupes_on_unique_key(self):
        frontier = InMemoryFrontier()

        async def scenario():
            first = await frontier.add(CrawlRequest("https://www.linkedin.com/jobs/view/1?trk=a", RequestKind.JOB_DETAIL))
            second = await frontier.add(CrawlRequest("https://www.linkedin.com/jobs/view/1/", RequestKind.JOB_DETAIL))
            return first, second

        assert run(scenario()) == (True, False)
        assert len(frontier) == 1

    def test_fifo_and_lifecycle(self):
        frontier = InMemoryFrontier()

        async def scenario():
            await frontier.add(CrawlRequest("https://www.linkedin.com/jobs/view/1", RequestKind.JOB_DETAIL))
            await frontier.add(CrawlRequest("https://www.linkedin.com/jobs/view/2", RequestKind.JOB_DETAIL))
            first = await frontier.fetch_next()
            assert not await frontier.is_finished()
            await frontier.mark_handled(first)
            second = await frontier.fetch_next()
            assert len(frontier) == 0
            assert not await frontier.is_finished()
            await frontier.mark_handled(second)
            return first.url, second.url, await frontier.is_finished(), await frontier.fetch_next()

        first, second, finished, nothing = run(scenario())
        assert first.endswith("/1") and second.endswith("/2")
        assert finished is True
        assert nothing is None
        assert frontier.handled_count == 2

    def test_reclaim_requeues_seen_request(self):
        """Test a reclaimed request comes back despite dedupe."""
        frontier = InMemoryFrontier()
        request = CrawlRequest("https://www.linkedin.com/jobs/view/1", RequestKind.JOB_DETAIL)

        async def scenario():
            await frontier.add(request)
            fetched = await frontier.fetch_next()
            fetched.retry_count += 1
            await frontier.reclaim(fetched)
            return await frontier.fetch_next()

        again = run(scenario())
        assert again is request
        assert again.retry_count == 1


class TestBuildSeedRequests:
    """Tests for initial seeding."""

    def test_query_mode(self):
        crawl_input = CrawlInput.from_dict({"search_queries": ["python", "  ", "go"], "location": "Berlin"})
        seeds = build_seed_requests(crawl_input)
        assert [s.search_query for s in seeds] == ["python", "go"]
        assert all(s.kind is RequestKind.SEARCH for s in seeds)
        assert all(s.location == "Berlin" and s.search_url is None for s in seeds)
        assert seeds[0].url == "https://www.linkedin.com/jobs/search/?keywords=python&location=Berlin&start=0"

    def test_url_mode(self):
        url = "https://www.linkedin.com/jobs/search/?keywords=rust&f_WT=2"
        seeds = build_seed_requests(CrawlInput.from_dict({"search_urls": [url]}))
        assert len(seeds) == 1
        assert seeds[0].url == url
        assert seeds[0].search_url == url
        assert seeds[0].search_query is None
        assert seeds[0].page_index == 0
