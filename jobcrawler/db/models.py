"""
Pydantic models for crawl output.

- JobRecord: one scraped job-detail page; every textual field falls back
  to "Not specified" so the record shape is always complete
- HiringTeamMember: one entry of the hiring-team list
- SessionCookie: a cookie normalized to the browser's add_cookies shape
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jobcrawler.utils.date_utils import get_current_timestamp


NOT_SPECIFIED = "Not specified"

TEXT_FIELDS = (
    "title",
    "company",
    "location",
    "location_type",
    "seniority",
    "employment_type",
    "description",
    "salary",
    "posted_date",
)


class HiringTeamMember(BaseModel):
    """A recruiter or hiring manager shown on the job page."""
    name: str = "Unknown"
    title: str = "Unknown"
    profile_url: str = ""

    model_config = ConfigDict(str_strip_whitespace=True)


class JobRecord(BaseModel):
    """
    A scraped job posting.

    Provenance is search_query + location_filter in query mode and
    search_url in URL mode; the unused side stays None and is omitted
    from the output dict.
    """
    url: str = Field(..., min_length=1, description="Job detail URL as requested")

    title: str = NOT_SPECIFIED
    company: str = NOT_SPECIFIED
    location: str = NOT_SPECIFIED
    location_type: str = NOT_SPECIFIED
    seniority: str = NOT_SPECIFIED
    employment_type: str = NOT_SPECIFIED
    description: str = NOT_SPECIFIED
    salary: str = NOT_SPECIFIED
    posted_date: str = NOT_SPECIFIED

    job_criteria: List[str] = Field(default_factory=list)
    hiring_team: List[HiringTeamMember] = Field(default_factory=list)

    # Provenance
    search_query: Optional[str] = None
    location_filter: Optional[str] = None
    search_url: Optional[str] = None

    scraped_at: str = Field(default_factory=get_current_timestamp)
    custom_data: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def default_missing_text(cls, v: Any) -> str:
        """Missing or blank text becomes the sentinel."""
        if v is None:
            return NOT_SPECIFIED
        text = str(v).strip()
        return text or NOT_SPECIFIED

    @field_validator("job_criteria", mode="before")
    @classmethod
    def clean_criteria(cls, v: Any) -> List[str]:
        if not v:
            return []
        return [str(item).strip() for item in v if item and str(item).strip()]

    def to_output(self) -> Dict[str, Any]:
        """Plain dict as written to the record sink."""
        return self.model_dump(exclude_none=True)


class SessionCookie(BaseModel):
    """
    A session cookie in the shape the browser context accepts.

    Field names follow Playwright's add_cookies() keys so that
    to_playwright() is a plain dump.
    """
    name: str = Field(..., min_length=1)
    value: str = ""
    domain: str = Field(..., min_length=1)
    path: str = "/"
    httpOnly: bool = False
    secure: bool = True
    sameSite: Literal["Lax", "Strict", "None"] = "Lax"
    expires: Optional[int] = None

    def to_playwright(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
