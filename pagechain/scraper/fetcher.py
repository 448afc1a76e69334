"""HTTP fetcher with a bounded retry budget.

Every failure (transport error, timeout, non-2xx status) consumes one
attempt and is retried the same way; nothing is classified as permanent.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Optional

import httpx
import webencodings

from pagechain.config import settings
from pagechain.scraper.errors import FetchError

logger = logging.getLogger(__name__)

_META_CHARSET = re.compile(
    rb"""<meta[^>]+charset\s*=\s*["']?\s*([A-Za-z0-9_.:\-]+)""",
    re.IGNORECASE,
)
_SNIFF_BYTES = 1024


def _default_headers() -> dict[str, str]:
    return {"User-Agent": settings.user_agent}


def _known_encoding(label: Optional[str]) -> Optional[webencodings.Encoding]:
    """Resolve *label* through the WHATWG encoding table, or ``None``.

    Browser aliases apply (``gb2312`` is GBK, ``iso-8859-1`` is
    windows-1252) and labels that are not text encodings are rejected.
    """
    if not label:
        return None
    return webencodings.lookup(label)


def _sniff_meta_charset(body: bytes) -> Optional[str]:
    """Return the charset declared by an HTML ``<meta>`` tag near the top of *body*."""
    match = _META_CHARSET.search(body[:_SNIFF_BYTES])
    if match:
        return match.group(1).decode("ascii", errors="ignore")
    return None


def decode_body(response: httpx.Response) -> str:
    """Decode *response* using its declared charset.

    Order of preference: the ``Content-Type`` charset, a ``<meta>`` charset in
    the first kilobyte of the body, then UTF-8.  Undecodable bytes are
    replaced rather than raising.
    """
    body = response.content
    encoding = (
        _known_encoding(response.charset_encoding)
        or _known_encoding(_sniff_meta_charset(body))
        or webencodings.UTF8
    )
    text, _ = encoding.codec_info.decode(body, "replace")
    return text


def _attempt(client: httpx.Client, url: str) -> str:
    response = client.get(url)
    if not response.is_success:
        raise FetchError(
            f"failed to access the url with code: {response.status_code}",
            url=url,
            status_code=response.status_code,
        )
    return decode_body(response)


def fetch_text(
    url: str,
    max_attempts: Optional[int] = None,
    *,
    client: Optional[httpx.Client] = None,
) -> str:
    """Fetch *url* and return its decoded body.

    Returns as soon as one attempt succeeds.  When every attempt fails the
    last failure is raised as a :class:`FetchError` carrying the URL, the
    status code (if the server answered) and the number of attempts made.

    Args:
        url: Absolute URL to GET.
        max_attempts: Attempt budget; defaults to ``settings.max_attempts``.
        client: Optional shared ``httpx.Client``.  When omitted a client is
            created for this call and closed afterwards.

    Raises:
        ValueError: If *url* is empty or *max_attempts* is below 1.
        FetchError: If no attempt succeeded.
    """
    if not url:
        raise ValueError("url must be non-empty")
    attempts = settings.max_attempts if max_attempts is None else max_attempts
    if attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {attempts}")

    owns_client = client is None
    if client is None:
        client = httpx.Client(
            headers=_default_headers(),
            timeout=settings.request_timeout,
            follow_redirects=True,
        )

    last_error: Optional[Exception] = None
    status_code: Optional[int] = None
    try:
        for attempt in range(1, attempts + 1):
            logger.info("[fetch] GET %s (attempt %d/%d)", url, attempt, attempts)
            try:
                return _attempt(client, url)
            except FetchError as exc:
                last_error = exc
                status_code = exc.status_code
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                last_error = exc
                status_code = None
            logger.warning("[fetch] attempt %d/%d failed for %s: %s", attempt, attempts, url, last_error)
            if attempt < attempts and settings.retry_delay > 0:
                time.sleep(settings.retry_delay)
    finally:
        if owns_client:
            client.close()

    detail = last_error.detail if isinstance(last_error, FetchError) else str(last_error)
    raise FetchError(
        f"gave up after {attempts} attempt(s): {detail}",
        url=url,
        status_code=status_code,
        attempts=attempts,
    ) from last_error


class HttpFetcher:
    """Callable fetcher that shares one ``httpx.Client`` across a crawl.

    Usage::

        with HttpFetcher() as fetch:
            text = fetch("https://example.com/1.html")
    """

    def __init__(
        self,
        max_attempts: Optional[int] = None,
        timeout: Optional[float] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        self.max_attempts = settings.max_attempts if max_attempts is None else max_attempts
        self._client = httpx.Client(
            headers=headers or _default_headers(),
            timeout=settings.request_timeout if timeout is None else timeout,
            follow_redirects=True,
        )

    def __call__(self, url: str) -> str:
        return fetch_text(url, self.max_attempts, client=self._client)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
