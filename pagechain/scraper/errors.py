"""Error types raised by the crawl pipeline.

Every failure carries an :class:`ErrorKind` so callers can map failures to
distinct exit statuses without parsing messages.  All of them are fatal to
the crawl they occur in.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    FETCH = "fetch"
    MALFORMED_PATTERN = "malformed_pattern"
    LINK_NOT_FOUND = "link_not_found"
    INVALID_BASE_URL = "invalid_base_url"
    START_NOT_FOUND = "start_not_found"
    END_NOT_FOUND = "end_not_found"
    CANCELLED = "cancelled"
    CONFIG = "config"


class CrawlError(Exception):
    """Base class for every pipeline failure.

    Attributes:
        kind: Stable :class:`ErrorKind` for the failure.
        detail: Human-readable description of what went wrong.
        url: The page URL being processed, when known.
        stage: Pipeline stage (``fetch``, ``resolve``, ``extract``, ``crawl``
            or ``config``).
    """

    stage = "crawl"

    def __init__(self, kind: ErrorKind, detail: str, *, url: str | None = None) -> None:
        super().__init__(detail)
        self.kind = kind
        self.detail = detail
        self.url = url

    def with_url(self, url: str) -> CrawlError:
        """Attach *url* unless one is already recorded; returns ``self``."""
        if not self.url:
            self.url = url
        return self

    def __str__(self) -> str:
        where = f" ({self.url})" if self.url else ""
        return f"[{self.stage}] {self.detail}{where}"


class FetchError(CrawlError):
    """Transport or HTTP status failure after the attempt budget is spent."""

    stage = "fetch"

    def __init__(
        self,
        detail: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        attempts: int = 0,
    ) -> None:
        super().__init__(ErrorKind.FETCH, detail, url=url)
        self.status_code = status_code
        self.attempts = attempts


class ResolverError(CrawlError):
    """The next-page link could not be located or resolved."""

    stage = "resolve"


class BoundaryError(CrawlError):
    """A content boundary marker was not found."""

    stage = "extract"

    def __init__(self, kind: ErrorKind, marker: str, *, url: str | None = None) -> None:
        which = "content-start" if kind is ErrorKind.START_NOT_FOUND else "content-end"
        super().__init__(kind, f"failed to locate {which}: {marker!r}", url=url)
        self.marker = marker


class CrawlCancelled(CrawlError):
    """The crawl was aborted by its caller (cancel signal or deadline)."""

    def __init__(self, detail: str = "crawl cancelled", *, url: str | None = None) -> None:
        super().__init__(ErrorKind.CANCELLED, detail, url=url)


class ConfigError(CrawlError):
    """The crawl document is unreadable or invalid."""

    stage = "config"

    def __init__(self, detail: str) -> None:
        super().__init__(ErrorKind.CONFIG, detail)
