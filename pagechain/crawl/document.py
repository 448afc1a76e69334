"""Crawl documents: the JSON file that describes one crawl.

Example::

    {
      "source": {"url": "http://site.com/book/1.html",
                 "next": "<a id=\\"next\\" href=\\"|\\">",
                 "auto-fetch": true},
      "filter": {"content-start": "<div id=\\"text\\">",
                 "content-end": "</div>"},
      "formater": {"deletes": ["ADVERTISEMENT"]}
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pagechain.scraper.errors import ConfigError
from pagechain.scraper.models import CrawlConfig


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class SourceSection(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    next: str
    auto_fetch: bool = Field(False, alias="auto-fetch")

    @field_validator("url")
    @classmethod
    def _url_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("source.url must not be empty")
        return value.strip()


class FilterSection(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content_start: str = Field(..., alias="content-start", min_length=1)
    content_end: str = Field(..., alias="content-end", min_length=1)


class FormatSection(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    deletes: List[str] = Field(default_factory=list)
    convert_breaks: bool = Field(False, alias="convert-breaks")


class CrawlDocument(BaseModel):
    # "formater" is the key historical documents use.
    model_config = ConfigDict(populate_by_name=True)

    source: SourceSection
    filter: FilterSection
    formatter: FormatSection = Field(default_factory=FormatSection, alias="formater")

    def to_config(self) -> CrawlConfig:
        return CrawlConfig(
            start_url=self.source.url,
            next_link_pattern=self.source.next,
            auto_continue=self.source.auto_fetch,
            content_start=self.filter.content_start,
            content_end=self.filter.content_end,
            deletes=tuple(self.formatter.deletes),
            convert_breaks=self.formatter.convert_breaks,
        )


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def parse_document(text: str) -> CrawlConfig:
    """Parse a JSON crawl document into a :class:`CrawlConfig`.

    Raises:
        ConfigError: If *text* is not JSON or does not match the schema.
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"crawl document is not valid JSON: {exc}") from exc
    try:
        return CrawlDocument.model_validate(raw).to_config()
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigError(f"invalid crawl document: {problems}") from exc


def load_document(path: Union[str, Path]) -> CrawlConfig:
    """Read and parse the crawl document at *path*."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read crawl document {str(path)!r}: {exc}") from exc
    return parse_document(text)
