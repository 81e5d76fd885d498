"""
URL utilities for the crawler.

Search URL rendering, canonicalization of discovered links, and the
unique keys the frontier deduplicates on.
"""

from typing import Collection, Optional
from urllib.parse import parse_qsl, quote, urlencode, urljoin, urlparse, urlunparse


LINKEDIN_JOBS_SEARCH = "https://www.linkedin.com/jobs/search/"

TRACKING_PARAMS = frozenset({
    "utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content",
    "gclid", "fbclid",
    # LinkedIn-specific click tracking
    "refid", "trackingid", "trk",
})

# Result-list position of a job card; paginates search pages, so job links only
JOB_LINK_PARAMS = TRACKING_PARAMS | {"position", "pagenum"}


def build_search_url(query: str, location: str, start: int = 0) -> str:
    """
    Render a guest job-search URL for a keyword/location pair.

    Example:
        >>> build_search_url("Data Engineer", "New York, NY")
        'https://www.linkedin.com/jobs/search/?keywords=Data%20Engineer&location=New%20York%2C%20NY&start=0'
    """
    return (
        f"{LINKEDIN_JOBS_SEARCH}?keywords={quote(query, safe='')}"
        f"&location={quote(location, safe='')}&start={int(start)}"
    )


def resolve_url(base: str, href: str) -> Optional[str]:
    """
    Resolve an href against the page URL, keeping it otherwise as found.

    Returns None for empty, fragment-only, javascript:/mailto: and
    non-http(s) links.

    Example:
        >>> resolve_url("https://www.linkedin.com/jobs/search/?keywords=go", "?keywords=go&pageNum=1")
        'https://www.linkedin.com/jobs/search/?keywords=go&pageNum=1'
    """
    href = (href or "").strip()
    if not href or href.startswith(("javascript:", "mailto:", "#")):
        return None
    try:
        url = urljoin(base, href)
        u = urlparse(url)
    except ValueError:
        return None
    if u.scheme not in ("http", "https") or not u.netloc:
        return None
    return url


def canon_url(base: str, href: str, drop_params: Collection[str] = TRACKING_PARAMS) -> Optional[str]:
    """
    Resolve an href against the page URL and strip tracking parameters.

    Lowercases scheme and host and drops the fragment.

    Args:
        base: URL of the page the href was found on
        href: Absolute or relative link
        drop_params: Lowercase query parameter names to remove

    Returns:
        Canonical absolute http(s) URL, or None if the href is unusable

    Example:
        >>> canon_url("https://www.linkedin.com/jobs/search/", "/jobs/view/123?refId=abc#top")
        'https://www.linkedin.com/jobs/view/123'
    """
    url = resolve_url(base, href)
    if url is None:
        return None
    u = urlparse(url)

    qs = [
        (k, v) for (k, v) in parse_qsl(u.query, keep_blank_values=True)
        if k.lower() not in drop_params
    ]
    return urlunparse((u.scheme.lower(), u.netloc.lower(), u.path, u.params, urlencode(qs), ""))


def normalize_url(url: str) -> str:
    """
    Normalize an absolute URL (tracking params removed), or return it unchanged.

    Example:
        >>> normalize_url("https://www.linkedin.com/jobs/search/?keywords=go&trk=public_jobs")
        'https://www.linkedin.com/jobs/search/?keywords=go'
    """
    return canon_url(url, url) or url


def unique_key(url: str, drop_query: bool = False) -> str:
    """
    Deduplication key for the frontier.

    Search pages differ only by query string (keywords, location, start or
    pageNum), so they keep it. Job-detail pages are identified by their path
    alone.

    Example:
        >>> unique_key("https://www.linkedin.com/jobs/view/42/?refId=x", drop_query=True)
        'https://www.linkedin.com/jobs/view/42'
    """
    normalized = normalize_url(url)
    if not drop_query:
        return normalized
    u = urlparse(normalized)
    path = u.path.rstrip("/") or "/"
    return urlunparse((u.scheme, u.netloc, path, "", "", ""))
