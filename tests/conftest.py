"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all tests in the test suite. Playwright stand-ins live in tests/fakes.py.
"""

import pytest
from pathlib import Path
from typing import Any, Dict, List

from jobcrawler.crawler.classifier import BlockClassifier
from jobcrawler.crawler.frontier import InMemoryFrontier
from jobcrawler.crawler.router import JobHandlers
from jobcrawler.crawler.stats import RunStats
from jobcrawler.db.storage import MemoryKeyValueStore, MemoryRecordSink
from tests.fakes import FakeElement, link


# ============================================================================
# Paths and Directories
# ============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def test_output_dir(tmp_path: Path) -> Path:
    """Create a temporary output directory for tests."""
    output_dir = tmp_path / "test_output"
    output_dir.mkdir(exist_ok=True)
    return output_dir


# ============================================================================
# Sample Data Fixtures
# ============================================================================

SEARCH_URL = "https://www.linkedin.com/jobs/search/?keywords=python&location=Berlin&start=0"


@pytest.fixture
def search_url() -> str:
    return SEARCH_URL


@pytest.fixture
def detail_elements() -> Dict[str, List[FakeElement]]:
    """Selector map of a fully rendered job-detail page."""
    return {
        '[data-test="top-card-title"]': [FakeElement("  Senior Python Engineer  ")],
        'a[data-test="top-card-org-name-link"]': [FakeElement("Example GmbH")],
        '[data-test="top-card-location"]': [FakeElement("Berlin, Germany")],
        '[data-test="job-details-location-type-label"]': [FakeElement("Hybrid")],
        '[data-test="job-criteria-seniority-level-skill-label"]': [FakeElement("Mid-Senior level")],
        '[data-test="job-details-employment-type-label"]': [FakeElement("Full-time")],
        '[data-test="job-details-jobs-details__main-content"]': [FakeElement("We build crawlers.")],
        'span[aria-label*="ago"]': [FakeElement("2 days ago")],
        '[data-test="job-details-job-criteria-item-subtitle"]': [
            FakeElement("Mid-Senior level"),
            FakeElement(""),
            FakeElement("Engineering"),
        ],
        '[data-section-id="hiring_team"] [data-entity-index]': [
            FakeElement(children={
                '[data-test*="entity-profile-title"]': [FakeElement("Ada Lovelace")],
                '[data-test*="entity-profile-subtitle"]': [FakeElement("Engineering Manager")],
                'a[data-test*="profile-link"]': [link("/in/ada")],
            }),
        ],
    }


@pytest.fixture
def sample_cookies() -> List[Dict[str, Any]]:
    """Cookies as exported by a browser extension."""
    return [
        {
            "name": "li_at",
            "value": "AQEDAR",
            "domain": ".linkedin.com",
            "path": "/",
            "httpOnly": True,
            "secure": True,
            "sameSite": "no_restriction",
            "expirationDate": 1798761600.25,
        },
        {
            "name": "JSESSIONID",
            "value": "ajax:123",
            "domain": ".www.linkedin.com",
            "sameSite": "unspecified",
        },
    ]


# ============================================================================
# Engine Fixtures
# ============================================================================

@pytest.fixture
def stats() -> RunStats:
    return RunStats()


@pytest.fixture
def frontier() -> InMemoryFrontier:
    return InMemoryFrontier()


@pytest.fixture
def record_sink() -> MemoryRecordSink:
    return MemoryRecordSink()


@pytest.fixture
def kv_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def classifier(stats) -> BlockClassifier:
    return BlockClassifier(stats)


@pytest.fixture
def handlers(frontier, record_sink, kv_store, stats, classifier) -> JobHandlers:
    return JobHandlers(
        frontier=frontier,
        record_sink=record_sink,
        store=kv_store,
        stats=stats,
        classifier=classifier,
        max_results=100,
        custom_data={"campaign": "spring"},
    )


@pytest.fixture
def mock_supabase_client():
    """Mock Supabase client for testing."""
    class MockTable:
        def __init__(self):
            self.data = []
            self.conflicts = []

        def upsert(self, rows, on_conflict=None):
            self.data.extend(rows if isinstance(rows, list) else [rows])
            self.conflicts.append(on_conflict)
            return self

        def execute(self):
            class Result:
                def __init__(self, data):
                    self.data = data
            return Result(self.data)

    class MockClient:
        def __init__(self):
            self.tables = {}

        def table(self, name: str):
            if name not in self.tables:
                self.tables[name] = MockTable()
            return self.tables[name]

    return MockClient()


# ============================================================================
# Test Markers
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
