"""
Unit tests for run statistics and the end-of-run report.
"""

from jobcrawler.crawler.stats import RunStats


class TestRunStats:
    """Tests for RunStats."""

    def test_initial_state(self):
        stats = RunStats()
        assert stats.jobs_found == 0
        assert stats.jobs_scraped == 0
        assert stats.errors == 0
        assert stats.ip_blocked is False
        assert stats.end_time is None

    def test_blocked_flag_is_sticky(self):
        stats = RunStats()
        stats.mark_blocked()
        stats.mark_blocked()
        assert stats.ip_blocked is True

    def test_finish_first_call_wins(self):
        stats = RunStats()
        stats.finish()
        end_time, duration = stats.end_time, stats.duration_ms
        stats.finish()
        assert stats.end_time == end_time
        assert stats.duration_ms == duration

    def test_to_dict(self):
        stats = RunStats(jobs_found=50, jobs_scraped=42, errors=3, requests_retried=2, requests_failed=1)
        stats.finish()
        data = stats.to_dict()
        assert data["jobs_found"] == 50
        assert data["jobs_scraped"] == 42
        assert data["errors"] == 3
        assert data["requests_retried"] == 2
        assert data["requests_failed"] == 1
        assert data["ip_blocked"] is False
        assert data["start_time"].endswith("+00:00")
        assert data["end_time"] is not None

    def test_fatal_snapshot(self):
        stats = RunStats(jobs_scraped=7)
        snapshot = stats.to_fatal_dict(RuntimeError("browser crashed"))
        assert snapshot["error"] == "browser crashed"
        assert snapshot["jobs_scraped"] == 7

    def test_fatal_snapshot_without_message(self):
        assert RunStats().to_fatal_dict(KeyError())["error"] == "KeyError"
        assert RunStats().to_fatal_dict(MemoryError())["error"] == "MemoryError"

    def test_report(self):
        stats = RunStats(jobs_found=50, jobs_scraped=42, errors=3)
        stats.mark_blocked()
        stats.finish()
        report = stats.render_report()
        lines = report.splitlines()
        assert "SCRAPING COMPLETED" in report
        assert "Jobs Found:       50" in report
        assert "Jobs Scraped:     42" in report
        assert "IP Blocked:       YES" in report
        assert len({len(line) for line in lines}) == 1
