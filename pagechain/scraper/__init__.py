"""Scraper package — fetch, next-link resolution and content extraction."""

from pagechain.scraper.errors import (
    BoundaryError,
    ConfigError,
    CrawlCancelled,
    CrawlError,
    ErrorKind,
    FetchError,
    ResolverError,
)
from pagechain.scraper.extractor import extract_between, format_text, strip_tags
from pagechain.scraper.fetcher import HttpFetcher, fetch_text
from pagechain.scraper.links import resolve_next_url
from pagechain.scraper.models import CrawlConfig, CrawlResult, Page

__all__ = [
    "fetch_text",
    "HttpFetcher",
    "extract_between",
    "strip_tags",
    "format_text",
    "resolve_next_url",
    "CrawlConfig",
    "CrawlResult",
    "Page",
    "ErrorKind",
    "CrawlError",
    "FetchError",
    "ResolverError",
    "BoundaryError",
    "CrawlCancelled",
    "ConfigError",
]
