"""
Pydantic models for failed-request records.

A FailedRequestRecord is written to the side-channel store once per
request whose retry budget is exhausted. Records are validated before
they are persisted so a malformed error never breaks the failure path.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jobcrawler.core.errors import BlockedError, RequestTimeoutError, SiteError

MAX_URL_LENGTH = 2048


class FailureKind(str, Enum):
    """Failure taxonomy for per-request errors."""
    BLOCKED = "blocked"
    SITE_ERROR = "site_error"
    TIMEOUT = "timeout"
    NAVIGATION_ERROR = "navigation_error"
    HANDLER_ERROR = "handler_error"


def classify_exception(exc: BaseException) -> FailureKind:
    """
    Map an exception raised while processing a request to a FailureKind.

    Uses the exception type first and falls back to message patterns for
    errors raised by the browser layer.

    Example:
        >>> classify_exception(BlockedError("https://www.linkedin.com/login"))
        <FailureKind.BLOCKED: 'blocked'>
    """
    if isinstance(exc, BlockedError):
        return FailureKind.BLOCKED
    if isinstance(exc, SiteError):
        return FailureKind.SITE_ERROR
    if isinstance(exc, RequestTimeoutError):
        return FailureKind.TIMEOUT

    exc_name = type(exc).__name__.lower()
    exc_msg = str(exc).lower()

    if "timeout" in exc_name or "timeout" in exc_msg:
        return FailureKind.TIMEOUT
    if "net::err_" in exc_msg or "navigation" in exc_msg or "page.goto" in exc_msg:
        return FailureKind.NAVIGATION_ERROR

    return FailureKind.HANDLER_ERROR


class FailedRequestRecord(BaseModel):
    """A request that failed permanently after exhausting its retries."""

    url: str = Field(..., min_length=1, description="Request URL (truncated to 2048 chars)")
    error: str = Field(..., description="Message of the last error")
    label: str = Field(..., description="Request kind (SEARCH or JOB_DETAIL)")
    failure_kind: FailureKind = Field(default=FailureKind.HANDLER_ERROR)
    retry_count: int = Field(default=0, ge=0)
    exception_type: Optional[str] = Field(None, max_length=255)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    failed_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="Failure timestamp",
    )

    model_config = ConfigDict(
        str_strip_whitespace=True,
        use_enum_values=True,
    )

    @field_validator("url")
    @classmethod
    def truncate_url(cls, v: str) -> str:
        return v[:MAX_URL_LENGTH]

    @field_validator("error")
    @classmethod
    def validate_error(cls, v: str) -> str:
        if not v or not v.strip():
            return "No error message provided"
        return v.strip()[:5000]

    @field_validator("metadata")
    @classmethod
    def sanitize_metadata(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        """Stringify values that cannot be serialized to JSON."""
        sanitized = {}
        for key, value in v.items():
            try:
                json.dumps(value)
                sanitized[key] = value
            except (TypeError, ValueError):
                sanitized[key] = str(value)
        return sanitized

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        url: str,
        label: str,
        retry_count: int = 0,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "FailedRequestRecord":
        """
        Build a record from the exception of the final attempt.

        Example:
            >>> rec = FailedRequestRecord.from_exception(
            ...     ValueError("boom"), url="https://x/jobs/view/1", label="JOB_DETAIL"
            ... )
            >>> rec.failure_kind
            'handler_error'
        """
        return cls(
            url=url,
            error=str(exc) or f"{type(exc).__name__} occurred",
            label=label,
            failure_kind=classify_exception(exc),
            retry_count=retry_count,
            exception_type=f"{type(exc).__module__}.{type(exc).__name__}",
            metadata=metadata or {},
        )
