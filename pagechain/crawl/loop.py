"""The crawl loop: fetch a page, find its successor, extract, emit, repeat.

The loop is an explicit state machine::

    FETCHING(url) → EXTRACTING(page) → EMITTING(result) ─┐
         ↑                                               │
         └──────────── (next url, auto-continue) ────────┤
                                                         ↓
                                                    TERMINATED

Only one page is alive at a time.  The URL to fetch next is the one piece
of state carried between iterations.  Any pipeline failure propagates and
ends the crawl; results already emitted stay valid.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, Optional, Protocol, Set

from pagechain.config import settings
from pagechain.scraper.errors import CrawlCancelled, CrawlError
from pagechain.scraper.extractor import extract_between, format_text
from pagechain.scraper.fetcher import HttpFetcher
from pagechain.scraper.links import resolve_next_url
from pagechain.scraper.models import CrawlConfig, CrawlResult, Page

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], str]
Sink = Callable[[CrawlResult], None]


class CancelSignal(Protocol):
    def is_set(self) -> bool: ...


class Phase(str, Enum):
    FETCHING = "fetching"
    EXTRACTING = "extracting"
    EMITTING = "emitting"
    TERMINATED = "terminated"


class StopReason(str, Enum):
    LAST_PAGE = "last_page"
    AUTO_CONTINUE_OFF = "auto_continue_off"
    MAX_PAGES = "max_pages"
    CYCLE = "cycle"


@dataclass
class CrawlState:
    """Mutable state of one crawl, owned by its :class:`CrawlLoop`."""

    current_url: str
    phase: Phase = Phase.FETCHING
    page: Optional[Page] = None
    next_url: str = ""
    result: Optional[CrawlResult] = None
    pages_emitted: int = 0
    visited: Set[str] = field(default_factory=set)
    stop_reason: Optional[StopReason] = None


@dataclass
class CrawlSummary:
    pages: int
    stop_reason: StopReason
    last_url: str


class CrawlLoop:
    """Run one crawl described by a :class:`CrawlConfig`.

    Iterate over the loop to receive :class:`CrawlResult` objects as pages
    are processed, or call :meth:`run` with a sink.

    Args:
        config: The crawl document.
        fetcher: ``url -> text`` callable; raises ``FetchError`` on failure.
        max_pages: Stop after this many pages (0 = no limit).  Defaults to
            ``settings.max_pages``.
        detect_cycles: Stop instead of re-fetching a URL already seen in
            this crawl.  Defaults to ``settings.detect_cycles``.
        absolute_host_links: Passed through to the link resolver.
        cancel: Object with ``is_set()``; checked before every fetch.
        deadline: Wall-clock budget in seconds for the whole crawl, checked
            before every fetch.
    """

    def __init__(
        self,
        config: CrawlConfig,
        fetcher: Fetcher,
        *,
        max_pages: Optional[int] = None,
        detect_cycles: Optional[bool] = None,
        absolute_host_links: Optional[bool] = None,
        cancel: Optional[CancelSignal] = None,
        deadline: Optional[float] = None,
    ) -> None:
        self.config = config
        self.fetcher = fetcher
        self.max_pages = settings.max_pages if max_pages is None else max_pages
        self.detect_cycles = settings.detect_cycles if detect_cycles is None else detect_cycles
        self.absolute_host_links = (
            settings.absolute_host_links if absolute_host_links is None else absolute_host_links
        )
        self.cancel = cancel
        self.deadline = deadline
        self.state = CrawlState(current_url=config.start_url)
        self._started_at: Optional[float] = None

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def _check_cancelled(self) -> None:
        url = self.state.current_url
        if self.cancel is not None and self.cancel.is_set():
            raise CrawlCancelled("crawl cancelled before fetch", url=url)
        if self.deadline is not None and self._started_at is not None:
            elapsed = time.monotonic() - self._started_at
            if elapsed >= self.deadline:
                raise CrawlCancelled(
                    f"crawl deadline of {self.deadline:g}s exceeded", url=url
                )

    def _fetching(self) -> None:
        state = self.state
        self._check_cancelled()
        logger.info("[crawl] page %d: %s", state.pages_emitted + 1, state.current_url)
        text = self.fetcher(state.current_url)
        state.visited.add(state.current_url)
        state.page = Page(url=state.current_url, raw_text=text)
        state.phase = Phase.EXTRACTING

    def _extracting(self) -> None:
        state = self.state
        page = state.page
        if page is None:
            raise RuntimeError("no page to extract from")
        cfg = self.config
        try:
            state.next_url = resolve_next_url(
                page.raw_text,
                page.url,
                cfg.next_link_pattern,
                absolute_host_links=self.absolute_host_links,
            )
            fragment = extract_between(page.raw_text, cfg.content_start, cfg.content_end)
        except CrawlError as exc:
            exc.with_url(page.url)
            raise
        text = format_text(fragment, cfg.deletes, convert_breaks=cfg.convert_breaks)
        state.result = CrawlResult(source_url=page.url, extracted_text=text)
        state.page = None
        state.phase = Phase.EMITTING

    def _emitting(self) -> None:
        state = self.state
        state.pages_emitted += 1
        state.result = None
        next_url = state.next_url

        if not next_url:
            self._terminate(StopReason.LAST_PAGE)
        elif not self.config.auto_continue:
            self._terminate(StopReason.AUTO_CONTINUE_OFF)
        elif self.max_pages and state.pages_emitted >= self.max_pages:
            logger.warning("[crawl] page limit %d reached; stopping before %s", self.max_pages, next_url)
            self._terminate(StopReason.MAX_PAGES)
        elif self.detect_cycles and next_url in state.visited:
            logger.warning("[crawl] next link %s was already fetched; stopping", next_url)
            self._terminate(StopReason.CYCLE)
        else:
            state.current_url = next_url
            state.next_url = ""
            state.phase = Phase.FETCHING

    def _terminate(self, reason: StopReason) -> None:
        self.state.phase = Phase.TERMINATED
        self.state.stop_reason = reason
        logger.info("[crawl] finished after %d page(s): %s", self.state.pages_emitted, reason.value)

    # ------------------------------------------------------------------
    # Driving
    # ------------------------------------------------------------------
    def __iter__(self) -> Iterator[CrawlResult]:
        if self._started_at is None:
            self._started_at = time.monotonic()
        state = self.state
        while state.phase is not Phase.TERMINATED:
            if state.phase is Phase.FETCHING:
                self._fetching()
            elif state.phase is Phase.EXTRACTING:
                self._extracting()
            elif state.phase is Phase.EMITTING:
                if state.result is None:
                    raise RuntimeError("no result to emit")
                yield state.result
                self._emitting()

    def run(self, sink: Sink) -> CrawlSummary:
        """Deliver every result to *sink* and return a summary."""
        for result in self:
            sink(result)
        return self.summary()

    def summary(self) -> CrawlSummary:
        state = self.state
        if state.stop_reason is None:
            raise RuntimeError("crawl has not finished")
        return CrawlSummary(
            pages=state.pages_emitted,
            stop_reason=state.stop_reason,
            last_url=state.current_url,
        )


def run_crawl(
    config: CrawlConfig,
    sink: Sink,
    *,
    fetcher: Optional[Fetcher] = None,
    max_attempts: Optional[int] = None,
    **loop_options,
) -> CrawlSummary:
    """Crawl from ``config.start_url`` and deliver each page to *sink*.

    When *fetcher* is omitted an :class:`HttpFetcher` is created for the
    crawl and closed when it ends.  Extra keyword arguments go to
    :class:`CrawlLoop`.
    """
    if fetcher is not None:
        return CrawlLoop(config, fetcher, **loop_options).run(sink)
    with HttpFetcher(max_attempts=max_attempts) as http:
        return CrawlLoop(config, http, **loop_options).run(sink)
