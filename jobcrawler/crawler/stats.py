"""
Run statistics for a crawl.

All workers run on one event loop and the counters are only touched
between awaits, so plain attribute updates are race-free.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from jobcrawler.utils.date_utils import format_timestamp, utc_now


@dataclass
class RunStats:
    """Counters and flags accumulated over one crawl run."""

    start_time: datetime = field(default_factory=utc_now)
    end_time: Optional[datetime] = None
    jobs_found: int = 0
    jobs_scraped: int = 0
    errors: int = 0
    requests_retried: int = 0
    requests_failed: int = 0
    ip_blocked: bool = False
    _started_monotonic: float = field(default_factory=time.monotonic, repr=False)
    _duration_ms: Optional[int] = field(default=None, repr=False)

    def mark_blocked(self) -> None:
        """Set the IP-blocked flag; it is never cleared for the rest of the run."""
        self.ip_blocked = True

    def finish(self) -> None:
        """Record end time and duration (first call wins)."""
        if self.end_time is None:
            self.end_time = utc_now()
            self._duration_ms = int((time.monotonic() - self._started_monotonic) * 1000)

    @property
    def duration_ms(self) -> int:
        if self._duration_ms is not None:
            return self._duration_ms
        return int((time.monotonic() - self._started_monotonic) * 1000)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_time": format_timestamp(self.start_time),
            "end_time": format_timestamp(self.end_time),
            "duration_ms": self.duration_ms,
            "jobs_found": self.jobs_found,
            "jobs_scraped": self.jobs_scraped,
            "errors": self.errors,
            "requests_retried": self.requests_retried,
            "requests_failed": self.requests_failed,
            "ip_blocked": self.ip_blocked,
        }

    def to_fatal_dict(self, error: BaseException) -> Dict[str, Any]:
        """Partial snapshot persisted when the run aborts."""
        snapshot = self.to_dict()
        snapshot["error"] = str(error) or type(error).__name__
        return snapshot

    def render_report(self) -> str:
        """Boxed end-of-run summary for the log."""
        rows = [
            ("Jobs Found:", str(self.jobs_found)),
            ("Jobs Scraped:", str(self.jobs_scraped)),
            ("Errors:", str(self.errors)),
            ("Failed Requests:", str(self.requests_failed)),
            ("IP Blocked:", "YES" if self.ip_blocked else "NO"),
            ("Duration:", f"{round(self.duration_ms / 1000)}s"),
        ]
        width = 39
        lines = ["╔" + "═" * width + "╗", "║" + "SCRAPING COMPLETED".center(width) + "║", "╠" + "═" * width + "╣"]
        for label, value in rows:
            lines.append("║ " + f"{label:<18}{value}".ljust(width - 1) + "║")
        lines.append("╚" + "═" * width + "╝")
        return "\n".join(lines)
