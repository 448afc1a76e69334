"""pagechain CLI — entry-point for crawling paginated content.

Usage:
    python cli/main.py --help

Commands:
    crawl   follow "next page" links from a crawl document and print content
    probe   fetch a single page and show what the crawl would do with it
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from pagechain.xxx import
# ...` works when the CLI is invoked as `python cli/main.py` from any
# working directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import logging
from typing import Optional

import typer

from cli.output import ConsoleSink, FileSink, render_result
from pagechain.config import settings
from pagechain.crawl.document import parse_document
from pagechain.crawl.loop import CrawlLoop
from pagechain.scraper.errors import CrawlError, ErrorKind
from pagechain.scraper.extractor import extract_between, format_text
from pagechain.scraper.fetcher import HttpFetcher
from pagechain.scraper.links import resolve_next_url
from pagechain.scraper.models import CrawlConfig, CrawlResult

app = typer.Typer(
    name="pagechain",
    help="Follow 'next page' links and extract the content of each page.",
    no_args_is_help=True,
)

# Exit statuses, one per failing stage.
EXIT_READ = 1
EXIT_CODES = {
    ErrorKind.CONFIG: 2,
    ErrorKind.FETCH: 3,
    ErrorKind.MALFORMED_PATTERN: 4,
    ErrorKind.LINK_NOT_FOUND: 4,
    ErrorKind.INVALID_BASE_URL: 4,
    ErrorKind.START_NOT_FOUND: 5,
    ErrorKind.END_NOT_FOUND: 5,
    ErrorKind.CANCELLED: 6,
}
EXIT_INTERRUPTED = 130


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    logging.getLogger("pagechain").setLevel(level)


def _read_document(source: str) -> CrawlConfig:
    """Read the crawl document from *source* (a path, or ``-`` for stdin)."""
    try:
        if source == "-":
            text = sys.stdin.read()
        else:
            text = Path(source).read_text(encoding="utf-8")
    except OSError as exc:
        typer.echo(f"[pagechain] cannot read crawl document {source!r}: {exc}", err=True)
        raise typer.Exit(EXIT_READ)
    try:
        return parse_document(text)
    except CrawlError as exc:
        _fail(exc)


def _fail(exc: CrawlError) -> None:
    typer.echo(f"[pagechain] error: {exc}", err=True)
    raise typer.Exit(EXIT_CODES.get(exc.kind, 1))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command("crawl")
def crawl(
    config: str = typer.Option("-", "--config", "-c", help="Crawl document (JSON); '-' reads stdin."),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Append page text to this file instead of stdout."
    ),
    with_url: bool = typer.Option(False, "--with-url", help="Head each page with a '# <url>' line."),
    max_pages: Optional[int] = typer.Option(
        None, "--max-pages", min=0, help="Stop after this many pages (0 = no limit)."
    ),
    attempts: Optional[int] = typer.Option(
        None, "--attempts", min=1, help="Fetch attempts per page."
    ),
    deadline: Optional[float] = typer.Option(
        None, "--deadline", min=0, help="Abort the crawl after this many seconds."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every fetch attempt."),
) -> None:
    """Crawl from the document's start URL, following next-page links."""
    _setup_logging(verbose)
    crawl_config = _read_document(config)

    sink = FileSink(output, with_url) if output else ConsoleSink(with_url)
    try:
        with HttpFetcher(max_attempts=attempts) as fetcher:
            loop = CrawlLoop(crawl_config, fetcher, max_pages=max_pages, deadline=deadline)
            summary = loop.run(sink)
    except CrawlError as exc:
        _fail(exc)
    except KeyboardInterrupt:
        typer.echo("[pagechain] interrupted", err=True)
        raise typer.Exit(EXIT_INTERRUPTED)
    finally:
        if isinstance(sink, FileSink):
            sink.close()

    typer.echo(
        f"[pagechain] {summary.pages} page(s), stopped: {summary.stop_reason.value}",
        err=True,
    )


@app.command("probe")
def probe(
    config: str = typer.Option("-", "--config", "-c", help="Crawl document (JSON); '-' reads stdin."),
    url: Optional[str] = typer.Option(None, "--url", help="Page to probe (default: the start URL)."),
    attempts: Optional[int] = typer.Option(None, "--attempts", min=1, help="Fetch attempts."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every fetch attempt."),
) -> None:
    """Fetch one page and show its next link and extracted content."""
    _setup_logging(verbose)
    crawl_config = _read_document(config)
    target = url or crawl_config.start_url

    try:
        with HttpFetcher(max_attempts=attempts) as fetcher:
            text = fetcher(target)
        next_url = resolve_next_url(
            text,
            target,
            crawl_config.next_link_pattern,
            absolute_host_links=settings.absolute_host_links,
        )
        fragment = extract_between(text, crawl_config.content_start, crawl_config.content_end)
    except CrawlError as exc:
        _fail(exc.with_url(target))

    content = format_text(fragment, crawl_config.deletes, convert_breaks=crawl_config.convert_breaks)
    typer.echo(f"[probe] Page   : {target}")
    typer.echo(f"[probe] Next   : {next_url or '(none, last page)'}")
    typer.echo(f"[probe] Chars  : {len(content)}")
    typer.echo("")
    typer.echo(render_result(CrawlResult(source_url=target, extracted_text=content)))


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
