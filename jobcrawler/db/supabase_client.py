"""
Supabase-backed record sink.

Upserts each job record into a table keyed on the job URL, so re-crawling
the same posting refreshes the row instead of duplicating it. The client
is created lazily from the environment; when Supabase is disabled or
misconfigured, get_supabase() returns None and no sink is built.
"""

import asyncio
from typing import Any, Dict, Optional

from jobcrawler.core.config import Config, get_config
from jobcrawler.core.logging import get_logger
from jobcrawler.utils.retry import RetryConfig, retry_with_backoff

logger = get_logger(__name__)

_client = None


def _init_client(config: Optional[Config] = None):
    """Create the singleton Supabase client, or None if disabled."""
    global _client
    if _client is not None:
        return _client

    config = config or get_config()

    if not config.supabase_enabled:
        logger.info("[SUPABASE] disabled via SUPABASE_ENABLED")
        return None

    if not config.supabase_url or not config.supabase_service_role_key:
        logger.warning("[SUPABASE] disabled: SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY missing")
        return None

    from supabase import create_client

    _client = create_client(config.supabase_url, config.supabase_service_role_key)
    logger.info(f"[SUPABASE] client initialized for {config.supabase_url}")
    return _client


def get_supabase(config: Optional[Config] = None):
    """Shared Supabase client, or None when disabled."""
    return _init_client(config)


def job_row(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Flatten a job record into a table row.

    Top-level fields map to columns; the full record is kept in raw_job.
    """
    return {
        "url": record["url"],
        "title": record.get("title"),
        "company": record.get("company"),
        "location": record.get("location"),
        "location_type": record.get("location_type"),
        "seniority": record.get("seniority"),
        "employment_type": record.get("employment_type"),
        "salary": record.get("salary"),
        "posted_date": record.get("posted_date"),
        "description": record.get("description"),
        "search_query": record.get("search_query"),
        "search_url": record.get("search_url"),
        "scraped_at": record.get("scraped_at"),
        "raw_job": record,
    }


class SupabaseRecordSink:
    """
    RecordSink that upserts into Supabase.

    Writes are retried with backoff; a write that still fails is logged and
    dropped so one bad row never aborts the crawl.
    """

    def __init__(self, client, table: str = "linkedin_jobs", retry: Optional[RetryConfig] = None):
        self.client = client
        self.table = table
        self.retry = retry or RetryConfig(max_retries=2, base_delay=1.0, max_delay=8.0)
        self.written = 0
        self.failed = 0

    def _upsert(self, row: Dict[str, Any]) -> None:
        self.client.table(self.table).upsert([row], on_conflict="url").execute()

    async def push(self, record: Dict[str, Any]) -> None:
        row = job_row(record)
        try:
            await asyncio.to_thread(retry_with_backoff, lambda: self._upsert(row), self.retry)
            self.written += 1
        except Exception as e:
            self.failed += 1
            logger.error(f"[SUPABASE] upsert failed for {row['url']}: {e}")

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> Optional["SupabaseRecordSink"]:
        """Build a sink from the environment, or None when Supabase is disabled."""
        config = config or get_config()
        client = get_supabase(config)
        if client is None:
            return None
        return cls(client, table=config.supabase_jobs_table)
