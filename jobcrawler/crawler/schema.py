"""
Declarative extraction schema for LinkedIn's guest job pages.

Every field is an ordered selector-fallback chain: the extractor tries the
candidates in order and keeps the first that matches. When LinkedIn ships a
new layout, add its selectors here (or publish a new schema version)
rather than branching in the handlers.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple


Selectors = Tuple[str, ...]


@dataclass(frozen=True)
class HiringTeamSchema:
    """Selectors for the two-tier hiring-team extraction."""

    section: str = '[data-section-id="hiring_team"]'
    # Primary: dedicated profile cards
    card: str = "[data-entity-index]"
    name: Selectors = ('[data-test*="entity-profile-title"]',)
    title: Selectors = ('[data-test*="entity-profile-subtitle"]',)
    profile_link: Selectors = ('a[data-test*="profile-link"]',)
    # Secondary: any list item carrying an anchor
    fallback_item: str = "li"
    fallback_title: str = "Recruiter"
    unknown: str = "Unknown"

    @property
    def card_selector(self) -> str:
        return f"{self.section} {self.card}"

    @property
    def fallback_selector(self) -> str:
        return f"{self.section} {self.fallback_item}"


@dataclass(frozen=True)
class ExtractionSchema:
    """A versioned set of selector chains for search and detail pages."""

    version: str

    # --- search results page ---
    listing_card: str
    job_links: Selectors
    next_page: Selectors

    # --- job detail page ---
    detail_ready: str
    fields: Dict[str, Selectors]
    criteria: Selectors
    hiring_team: HiringTeamSchema = field(default_factory=HiringTeamSchema)

    # --- block / diagnostics markers ---
    login_form: str = 'form[data-id="sign-in-form"]'
    challenge_form: str = '[data-test-id="challenge"]'
    jobs_container: str = ".jobs-search__results-list"


LINKEDIN_GUEST_V1 = ExtractionSchema(
    version="linkedin-guest/1",
    listing_card=".base-card",
    job_links=(
        "a.base-card__full-link",
        "a.base-search-card__full-link",
        ".jobs-search__results-list li a[href*='/jobs/view/']",
        "a[href*='/jobs/view/']",
    ),
    next_page=(
        'a[aria-label="View next page"]',
        'a[aria-label="Next"]',
        "a[rel='next']",
    ),
    detail_ready='[data-test="top-card-title"]',
    fields={
        "title": (
            '[data-test="top-card-title"]',
            "h1.top-card-layout__title",
            "h1.topcard__title",
        ),
        "company": (
            'a[data-test="top-card-org-name-link"]',
            "a.topcard__org-name-link",
            ".topcard__flavor--black-link",
        ),
        "location": (
            '[data-test="top-card-location"]',
            ".topcard__flavor--bullet",
        ),
        "location_type": ('[data-test="job-details-location-type-label"]',),
        "seniority": (
            '[data-test="job-criteria-seniority-level-skill-label"]',
        ),
        "employment_type": ('[data-test="job-details-employment-type-label"]',),
        "description": (
            '[data-test="job-details-jobs-details__main-content"]',
            ".show-more-less-html__markup",
            ".description__text",
        ),
        "salary": (
            '[data-test="job-details-compensation-label"]',
            ".compensation__salary",
        ),
        "posted_date": (
            'span[aria-label*="ago"]',
            ".posted-time-ago__text",
        ),
    },
    criteria=(
        '[data-test="job-details-job-criteria-item-subtitle"]',
        ".description__job-criteria-text",
    ),
)

DEFAULT_SCHEMA = LINKEDIN_GUEST_V1

# Wait budgets (ms) for the readiness selectors
SEARCH_READY_TIMEOUT_MS = 15_000
DETAIL_READY_TIMEOUT_MS = 12_000
# Settle time after the detail-page scroll
SCROLL_SETTLE_MS = 1_000
