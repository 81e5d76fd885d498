"""
LinkedIn jobs crawler.

Subpackages:
- core: logging, configuration, error taxonomy
- crawler: frontier, router, session, classifier, controller
- db: record models and persistence sinks
- utils: retry/backoff and timestamp helpers
"""

__version__ = "1.0.0"
