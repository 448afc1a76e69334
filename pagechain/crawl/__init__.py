"""Crawl package — the multi-page loop and crawl documents."""

from pagechain.crawl.document import CrawlDocument, load_document, parse_document
from pagechain.crawl.loop import (
    CrawlLoop,
    CrawlState,
    CrawlSummary,
    Phase,
    StopReason,
    run_crawl,
)

__all__ = [
    "CrawlLoop",
    "CrawlState",
    "CrawlSummary",
    "Phase",
    "StopReason",
    "run_crawl",
    "CrawlDocument",
    "parse_document",
    "load_document",
]
