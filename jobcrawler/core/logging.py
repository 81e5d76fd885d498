"""
Logging configuration for the jobs crawler.

Console output plus a dated log file per run day. Every module obtains
its logger through get_logger(__name__) so handler output can be filtered
by component (e.g. jobcrawler.crawler.router).
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are chatty at INFO (supabase uses httpx)
NOISY_LOGGERS = ("httpx", "httpcore", "asyncio")


def setup_logging(
    level: str = DEFAULT_LOG_LEVEL,
    log_file: Optional[str] = None,
    console: bool = True,
    log_dir: Path = Path("logs"),
) -> logging.Logger:
    """
    Configure the root logger for a crawl run.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Explicit log file path (default: <log_dir>/crawler_YYYYMMDD.log)
        console: Whether to also log to stdout
        log_dir: Directory used when log_file is not given

    Returns:
        Configured root logger

    Example:
        >>> logger = setup_logging(level="DEBUG", console=False)
        >>> logger.debug("crawler starting")
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
    else:
        date_str = datetime.now().strftime("%Y%m%d")
        log_path = Path(log_dir) / f"crawler_{date_str}.log"

    log_path.parent.mkdir(exist_ok=True, parents=True)

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(numeric_level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    root_logger.info(f"Logging initialized - Level: {level.upper()}, File: {log_path}")

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module (pass __name__)."""
    return logging.getLogger(name)


def init_crawler_logging(
    debug: bool = False,
    log_dir: Path = Path("logs"),
    level: str = DEFAULT_LOG_LEVEL,
) -> logging.Logger:
    """
    Initialize logging for a crawl run.

    Args:
        debug: Force DEBUG level (the run input's debug_mode)
        log_dir: Directory for the dated log file
        level: Level used when debug is off

    Returns:
        Configured root logger
    """
    return setup_logging(level="DEBUG" if debug else level, log_dir=log_dir)
