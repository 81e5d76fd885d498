"""
Unit tests for selector-fallback field extraction.
"""

import asyncio

from jobcrawler.crawler.extractor import FieldExtractor, as_candidates
from tests.fakes import FakeElement, FakePage, link

DETAIL_URL = "https://www.linkedin.com/jobs/view/4242"

HT_CARDS = '[data-section-id="hiring_team"] [data-entity-index]'
HT_ITEMS = '[data-section-id="hiring_team"] li'


def run(coro):
    return asyncio.run(coro)


class TestAsCandidates:
    def test_single_selector(self):
        assert as_candidates("h1") == ["h1"]

    def test_list_drops_empty(self):
        assert as_candidates(["h1", "", ".title"]) == ["h1", ".title"]


class TestGetText:
    """Tests for FieldExtractor.get_text."""

    def test_first_candidate_wins(self):
        page = FakePage(elements={"h1": [FakeElement("Primary")], ".title": [FakeElement("Secondary")]})
        assert run(FieldExtractor(page).get_text(["h1", ".title"])) == "Primary"

    def test_falls_back_to_next_candidate(self):
        """Test a missing first selector falls through to the second."""
        page = FakePage(elements={".title": [FakeElement("  Data Engineer \n")]})
        assert run(FieldExtractor(page).get_text(["h1", ".title"])) == "Data Engineer"

    def test_empty_match_falls_through(self):
        """Test a selector whose matches are all blank counts as a miss."""
        page = FakePage(elements={"h1": [FakeElement("   ")], ".title": [FakeElement("Found")]})
        assert run(FieldExtractor(page).get_text(["h1", ".title"])) == "Found"

    def test_first_non_empty_match_of_selector(self):
        page = FakePage(elements={"h1": [FakeElement(""), FakeElement("Second")]})
        assert run(FieldExtractor(page).get_text("h1")) == "Second"

    def test_all_miss_returns_empty(self):
        assert run(FieldExtractor(FakePage()).get_text(["h1", ".title"])) == ""

    def test_detached_element_is_a_miss(self):
        page = FakePage(elements={"h1": [FakeElement("x", fail=True)], ".title": [FakeElement("ok")]})
        assert run(FieldExtractor(page).get_text(["h1", ".title"])) == "ok"


class TestGetAllText:
    """Tests for FieldExtractor.get_all_text."""

    def test_texts_of_first_matching_selector(self):
        page = FakePage(elements={
            ".criteria": [FakeElement(" Senior "), FakeElement(""), FakeElement("IT")],
            ".other": [FakeElement("ignored")],
        })
        assert run(FieldExtractor(page).get_all_text([".missing", ".criteria", ".other"])) == ["Senior", "IT"]

    def test_all_miss_returns_empty_list(self):
        assert run(FieldExtractor(FakePage()).get_all_text([".a", ".b"])) == []


class TestGetHrefs:
    """Tests for FieldExtractor.get_hrefs."""

    def test_resolves_relative_links(self):
        page = FakePage(
            url="https://www.linkedin.com/jobs/search/?keywords=go",
            elements={"a.card": [link("/jobs/view/1"), link("https://www.linkedin.com/jobs/view/2")]},
        )
        assert run(FieldExtractor(page).get_hrefs("a.card")) == [
            "https://www.linkedin.com/jobs/view/1",
            "https://www.linkedin.com/jobs/view/2",
        ]

    def test_selector_without_hrefs_falls_through(self):
        page = FakePage(
            url="https://www.linkedin.com/jobs/search/",
            elements={"a.card": [FakeElement("no href")], "a.alt": [link("/jobs/view/3")]},
        )
        assert run(FieldExtractor(page).get_hrefs(["a.card", "a.alt"])) == ["https://www.linkedin.com/jobs/view/3"]


class TestExtractFields:
    """Tests for whole-schema extraction."""

    def test_full_page(self, detail_elements):
        page = FakePage(url=DETAIL_URL, elements=detail_elements)
        fields = run(FieldExtractor(page).extract_fields())

        assert fields["title"] == "Senior Python Engineer"
        assert fields["company"] == "Example GmbH"
        assert fields["location"] == "Berlin, Germany"
        assert fields["location_type"] == "Hybrid"
        assert fields["seniority"] == "Mid-Senior level"
        assert fields["employment_type"] == "Full-time"
        assert fields["description"] == "We build crawlers."
        assert fields["posted_date"] == "2 days ago"
        assert fields["salary"] == ""
        assert fields["job_criteria"] == ["Mid-Senior level", "Engineering"]

    def test_legacy_title_selector(self):
        page = FakePage(url=DETAIL_URL, elements={"h1.topcard__title": [FakeElement("Legacy Title")]})
        fields = run(FieldExtractor(page).extract_fields())
        assert fields["title"] == "Legacy Title"
        assert fields["company"] == ""

    def test_blank_page_never_raises(self):
        fields = run(FieldExtractor(FakePage(url=DETAIL_URL)).extract_fields())
        assert fields["job_criteria"] == []
        assert all(fields[k] == "" for k in fields if k != "job_criteria")


class TestExtractHiringTeam:
    """Tests for the two-tier hiring team extraction."""

    def test_primary_cards(self, detail_elements):
        page = FakePage(url=DETAIL_URL, elements=detail_elements)
        team = run(FieldExtractor(page).extract_hiring_team())
        assert team == [{
            "name": "Ada Lovelace",
            "title": "Engineering Manager",
            "profile_url": "https://www.linkedin.com/in/ada",
        }]

    def test_card_missing_parts_uses_unknown(self):
        page = FakePage(url=DETAIL_URL, elements={HT_CARDS: [FakeElement()]})
        team = run(FieldExtractor(page).extract_hiring_team())
        assert team == [{"name": "Unknown", "title": "Unknown", "profile_url": ""}]

    def test_fallback_list_items(self):
        """Test list items with links are used when no cards exist."""
        page = FakePage(url=DETAIL_URL, elements={HT_ITEMS: [
            FakeElement(children={"a": [link("https://www.linkedin.com/in/grace", " Grace Hopper ")]}),
            FakeElement("no link here"),
        ]})
        team = run(FieldExtractor(page).extract_hiring_team())
        assert team == [{
            "name": "Grace Hopper",
            "title": "Recruiter",
            "profile_url": "https://www.linkedin.com/in/grace",
        }]

    def test_cards_take_precedence_over_fallback(self, detail_elements):
        detail_elements[HT_ITEMS] = [FakeElement(children={"a": [link("/in/other", "Other")]})]
        page = FakePage(url=DETAIL_URL, elements=detail_elements)
        team = run(FieldExtractor(page).extract_hiring_team())
        assert [m["name"] for m in team] == ["Ada Lovelace"]

    def test_no_section(self):
        assert run(FieldExtractor(FakePage(url=DETAIL_URL)).extract_hiring_team()) == []

    def test_broken_item_returns_partial(self):
        """Test a failure mid-way is contained."""
        page = FakePage(url=DETAIL_URL, elements={HT_ITEMS: [
            FakeElement(children={"a": [link("/in/a", "A")]}),
            FakeElement(children={"a": [FakeElement("B", fail=True)]}),
        ]})
        team = run(FieldExtractor(page).extract_hiring_team())
        assert [m["name"] for m in team] == ["A"]
