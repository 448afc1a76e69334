"""Next-page link discovery.

A next-link pattern is two literal delimiters joined by ``|``: the text that
immediately precedes the pagination URL and the text that immediately
follows it, e.g. ``'<a id="next" href="|">'``.  The token between them is
resolved against the URL of the page it was found on:

* ``http...``  absolute, used as-is
* ``/path``    host-relative, ``hostname + path`` (just ``/path`` when the
  base URL has no host)
* otherwise    path-relative, sibling of the current page
"""

from __future__ import annotations

from typing import Tuple
from urllib.parse import urlsplit

from pagechain.scraper.errors import ErrorKind, ResolverError

PATTERN_SEPARATOR = "|"


def split_pattern(pattern: str) -> Tuple[str, str]:
    """Split *pattern* into its ``(before, after)`` delimiters.

    Raises:
        ResolverError: ``MALFORMED_PATTERN`` unless there is exactly one
            separator with non-empty text on both sides.
    """
    parts = pattern.split(PATTERN_SEPARATOR)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ResolverError(
            ErrorKind.MALFORMED_PATTERN,
            f"next-link pattern must be 'before{PATTERN_SEPARATOR}after', got {pattern!r}",
        )
    return parts[0], parts[1]


def find_link_token(page_text: str, before: str, after: str) -> str:
    """Return the raw text between the first *before* and the next *after*."""
    start = page_text.find(before)
    if start < 0:
        raise ResolverError(
            ErrorKind.LINK_NOT_FOUND,
            f"failed to match the start of the next-link pattern: {before!r}",
        )
    start += len(before)
    end = page_text.find(after, start)
    if end < 0:
        raise ResolverError(
            ErrorKind.LINK_NOT_FOUND,
            f"failed to match the end of the next-link pattern: {after!r}",
        )
    return page_text[start:end]


def _host_relative(token: str, base_url: str, absolute: bool) -> str:
    parts = urlsplit(base_url)
    # A base without a host contributes nothing: the token comes back as-is.
    if not parts.hostname:
        return token
    if absolute:
        return f"{parts.scheme}://{parts.netloc}{token}"
    # NOTE: no scheme is added here; see DESIGN.md (host-relative links).
    return parts.hostname + token


def _path_relative(token: str, base_url: str) -> str:
    cut = base_url.rfind("/")
    if cut < 0:
        raise ResolverError(
            ErrorKind.INVALID_BASE_URL,
            f"cannot acquire base url from: {base_url!r}",
        )
    return base_url[:cut] + "/" + token


def resolve_next_url(
    page_text: str,
    base_url: str,
    pattern: str,
    *,
    absolute_host_links: bool = False,
) -> str:
    """Find the next-page link in *page_text* and make it absolute.

    Args:
        page_text: Raw markup of the current page.
        base_url: URL the page was fetched from.
        pattern: ``before|after`` delimiter pair.
        absolute_host_links: Keep the base URL's scheme for host-relative
            links instead of returning ``hostname + path``.

    Returns:
        The next URL, or ``""`` when the link token is empty (last page).

    Raises:
        ResolverError: ``MALFORMED_PATTERN``, ``LINK_NOT_FOUND`` or
            ``INVALID_BASE_URL`` (path-relative tokens only).
    """
    before, after = split_pattern(pattern)
    token = find_link_token(page_text, before, after)
    if not token.strip():
        return ""
    if token.startswith("http"):
        return token
    if token.startswith("/"):
        return _host_relative(token, base_url, absolute_host_links)
    return _path_relative(token, base_url)
