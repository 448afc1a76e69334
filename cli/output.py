"""Result sinks for the CLI: where each crawled page's text goes."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, TextIO

import typer

from pagechain.scraper.models import CrawlResult


def render_result(result: CrawlResult, with_url: bool = False) -> str:
    """Return the text written for *result*, optionally headed by its URL."""
    if with_url:
        return f"# {result.source_url}\n{result.extracted_text}"
    return result.extracted_text


class ConsoleSink:
    """Echo each page's text to stdout."""

    def __init__(self, with_url: bool = False) -> None:
        self.with_url = with_url
        self.count = 0

    def __call__(self, result: CrawlResult) -> None:
        typer.echo(render_result(result, self.with_url))
        self.count += 1


class FileSink:
    """Append each page's text to a UTF-8 file.

    The file is opened lazily on the first result so a crawl that fails on
    its first page leaves no empty file behind.
    """

    def __init__(self, path: Path, with_url: bool = False) -> None:
        self.path = path
        self.with_url = with_url
        self.count = 0
        self._fh: Optional[TextIO] = None

    def __call__(self, result: CrawlResult) -> None:
        if self._fh is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = self.path.open("a", encoding="utf-8")
        self._fh.write(render_result(result, self.with_url) + "\n")
        self._fh.flush()
        self.count += 1

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def __enter__(self) -> FileSink:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
