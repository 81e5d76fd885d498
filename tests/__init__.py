"""
Jobs Crawler Test Suite

This package contains all automated tests for the jobs crawler.

Structure:
- unit/: Fast, isolated unit tests driven by in-memory Playwright fakes
"""
