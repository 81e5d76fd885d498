"""
Configuration for the jobs crawler.

Two layers:
- Config: runtime knobs read from the environment (configs/.env)
- CrawlInput: the validated input of a single crawl run (what to search,
  how many results, delays, cookies, passthrough data)
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from jobcrawler.core.errors import InputValidationError


# The target site penalizes parallel sessions from one client
MAX_CONCURRENCY_CAP = 2

_FALSY = {"0", "false", "False", "no"}


class Config:
    """
    Runtime configuration loaded from environment variables.

    Values are read from configs/.env (if present) or the process environment.
    """

    def __init__(self, env_path: Optional[Path] = None):
        """
        Initialize configuration from environment.

        Args:
            env_path: Path to .env file (default: configs/.env)
        """
        if env_path is None:
            env_path = Path("configs/.env")

        load_dotenv(dotenv_path=env_path, override=True)

        # === Browser ===
        self.headless: bool = os.getenv("HEADLESS", "1") not in _FALSY
        self.nav_timeout_ms: int = int(os.getenv("NAV_TIMEOUT_MS", "60000"))
        self.proxy_server: Optional[str] = os.getenv("PROXY_SERVER") or None
        self.proxy_username: Optional[str] = os.getenv("PROXY_USERNAME") or None
        self.proxy_password: Optional[str] = os.getenv("PROXY_PASSWORD") or None

        # === Crawl policy ===
        self.handler_timeout_s: float = float(os.getenv("HANDLER_TIMEOUT_S", "90"))
        self.max_request_retries: int = int(os.getenv("MAX_REQUEST_RETRIES", "5"))
        self.max_pages_per_search: int = int(os.getenv("MAX_PAGES_PER_SEARCH", "40"))

        # === Supabase (optional record sink) ===
        self.supabase_enabled: bool = os.getenv("SUPABASE_ENABLED", "0") not in _FALSY
        self.supabase_url: Optional[str] = os.getenv("SUPABASE_URL")
        self.supabase_service_role_key: Optional[str] = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
        self.supabase_jobs_table: str = os.getenv("SUPABASE_JOBS_TABLE", "linkedin_jobs")

        # === Logging / output ===
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO")
        self.log_dir: Path = Path(os.getenv("LOG_DIR", "logs"))
        self.base_out_dir: Path = Path(os.getenv("BASE_OUT_DIR", "out"))

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: If any setting is missing or out of range
        """
        errors = []

        if self.nav_timeout_ms <= 0:
            errors.append(f"NAV_TIMEOUT_MS must be positive, got {self.nav_timeout_ms}")

        if self.handler_timeout_s <= 0:
            errors.append(f"HANDLER_TIMEOUT_S must be positive, got {self.handler_timeout_s}")

        if self.max_request_retries < 0:
            errors.append(f"MAX_REQUEST_RETRIES must be non-negative, got {self.max_request_retries}")

        if self.max_pages_per_search <= 0:
            errors.append(f"MAX_PAGES_PER_SEARCH must be positive, got {self.max_pages_per_search}")

        if self.supabase_enabled:
            if not self.supabase_url:
                errors.append("SUPABASE_URL is required when Supabase is enabled")
            if not self.supabase_service_role_key:
                errors.append("SUPABASE_SERVICE_ROLE_KEY is required when Supabase is enabled")

        if errors:
            raise ValueError("Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors))

    def proxy(self) -> Optional[Dict[str, str]]:
        """Playwright proxy settings from the environment, if any."""
        if not self.proxy_server:
            return None
        proxy = {"server": self.proxy_server}
        if self.proxy_username:
            proxy["username"] = self.proxy_username
        if self.proxy_password:
            proxy["password"] = self.proxy_password
        return proxy

    def __repr__(self) -> str:
        return (
            f"Config(\n"
            f"  headless={self.headless},\n"
            f"  nav_timeout_ms={self.nav_timeout_ms},\n"
            f"  handler_timeout_s={self.handler_timeout_s},\n"
            f"  max_request_retries={self.max_request_retries},\n"
            f"  proxy_server={'***' if self.proxy_server else 'NOT SET'},\n"
            f"  supabase_enabled={self.supabase_enabled},\n"
            f"  log_level={self.log_level}\n"
            f")"
        )


_config: Optional[Config] = None


def get_config(env_path: Optional[Path] = None) -> Config:
    """Return the global Config, loading it on first call."""
    global _config
    if _config is None:
        _config = Config(env_path=env_path)
    return _config


def validate_config(env_path: Optional[Path] = None) -> None:
    """
    Validate the global configuration; call at startup to fail fast.

    Raises:
        ValueError: If configuration is invalid
    """
    config = get_config(env_path=env_path)
    config.validate()


class ProxySettings(BaseModel):
    """Proxy endpoint handed to the browser; rotation is the provider's job."""
    server: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    def to_playwright(self) -> Optional[Dict[str, str]]:
        if not self.server:
            return None
        return self.model_dump(exclude_none=True)


def is_linkedin_jobs_url(url: str) -> bool:
    """
    True for http(s) URLs on linkedin.com under the /jobs path.

    Example:
        >>> is_linkedin_jobs_url("https://www.linkedin.com/jobs/search/?keywords=python")
        True
        >>> is_linkedin_jobs_url("https://www.linkedin.com/feed/")
        False
    """
    try:
        u = urlparse(url.strip())
    except (AttributeError, ValueError):
        return False
    host = u.netloc.lower().split(":")[0]
    return (
        u.scheme in ("http", "https")
        and (host == "linkedin.com" or host.endswith(".linkedin.com"))
        and u.path.startswith("/jobs")
    )


class CrawlInput(BaseModel):
    """
    Validated input for one crawl run.

    Either search_urls (URL mode) or search_queries + location (query mode)
    must be provided. session_cookies is kept as given; a payload that is
    not list-shaped is skipped at injection time rather than rejected here.
    """

    search_queries: List[str] = Field(default_factory=list)
    location: str = ""
    search_urls: List[str] = Field(default_factory=list)
    max_results: int = 100
    max_concurrency: int = 2
    max_pages_per_search: Optional[int] = None
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    custom_data: Dict[str, Any] = Field(default_factory=dict)
    session_cookies: Optional[Any] = None
    min_delay_ms: int = 2000
    max_delay_ms: int = 5000
    debug_mode: bool = False

    model_config = ConfigDict(str_strip_whitespace=True)

    @property
    def uses_search_urls(self) -> bool:
        return bool(self.search_urls)

    @property
    def effective_concurrency(self) -> int:
        """Requested concurrency, hard-capped regardless of what was asked."""
        return max(1, min(self.max_concurrency, MAX_CONCURRENCY_CAP))

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CrawlInput":
        """
        Parse and validate raw run input.

        Raises:
            InputValidationError: If the input is malformed or incomplete
        """
        try:
            crawl_input = cls.model_validate(data or {})
        except ValidationError as e:
            problems = [
                f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}"
                for err in e.errors()
            ]
            raise InputValidationError(problems) from e
        crawl_input.validate_input()
        return crawl_input

    def validate_input(self) -> None:
        """
        Check semantic constraints, collecting every problem.

        Raises:
            InputValidationError: If any constraint is violated
        """
        problems = []

        if self.uses_search_urls:
            for url in self.search_urls:
                if not is_linkedin_jobs_url(url):
                    problems.append(f"search_urls entries must be a LinkedIn jobs URL, got {url!r}")
        else:
            queries = [q for q in self.search_queries if q and q.strip()]
            if not queries:
                problems.append("search_queries must be provided and non-empty")
            if not self.location:
                problems.append("location must be provided and non-empty")

        if self.max_results <= 0:
            problems.append(f"max_results must be positive, got {self.max_results}")
        if self.max_concurrency <= 0:
            problems.append(f"max_concurrency must be positive, got {self.max_concurrency}")
        if self.max_pages_per_search is not None and self.max_pages_per_search <= 0:
            problems.append(f"max_pages_per_search must be positive, got {self.max_pages_per_search}")
        if self.min_delay_ms < 0:
            problems.append(f"min_delay_ms must be non-negative, got {self.min_delay_ms}")
        if self.min_delay_ms > self.max_delay_ms:
            problems.append(
                f"min_delay_ms ({self.min_delay_ms}) cannot be greater than "
                f"max_delay_ms ({self.max_delay_ms})"
            )

        if problems:
            raise InputValidationError(problems)
