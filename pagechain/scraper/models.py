"""Data models for the crawl pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class CrawlConfig:
    """Everything one crawl needs; fixed for the duration of the crawl.

    ``next_link_pattern`` encodes the text immediately before and after the
    next-page URL, separated by a literal ``|`` (e.g. ``'href="|"'``).
    """

    start_url: str
    next_link_pattern: str
    auto_continue: bool
    content_start: str
    content_end: str
    deletes: Tuple[str, ...] = field(default_factory=tuple)
    convert_breaks: bool = False


@dataclass
class Page:
    """A fetched page; lives only for one loop iteration."""

    url: str
    raw_text: str


@dataclass(frozen=True)
class CrawlResult:
    """The output of one crawl iteration."""

    source_url: str
    extracted_text: str
