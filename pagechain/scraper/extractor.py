"""Content extraction: bound a fragment between two markers and strip markup."""

from __future__ import annotations

import re
from typing import Iterable

from pagechain.scraper.errors import BoundaryError, ErrorKind

_BREAK_TAG = re.compile(r"<br\s*/?>", re.IGNORECASE)


def extract_between(text: str, start_marker: str, end_marker: str) -> str:
    """Return the text strictly between *start_marker* and *end_marker*.

    Markers are literal substrings; the first occurrence of *start_marker*
    wins, and *end_marker* is only searched for after it.

    Raises:
        BoundaryError: ``START_NOT_FOUND`` or ``END_NOT_FOUND``.
    """
    start = text.find(start_marker)
    if start < 0:
        raise BoundaryError(ErrorKind.START_NOT_FOUND, start_marker)
    start += len(start_marker)
    end = text.find(end_marker, start)
    if end < 0:
        raise BoundaryError(ErrorKind.END_NOT_FOUND, end_marker)
    return text[start:end]


def strip_tags(text: str) -> str:
    """Drop every ``<...>`` span from *text*.

    A ``>`` outside a tag is ordinary text.  An unterminated ``<`` swallows
    the rest of the input.
    """
    out = []
    in_tag = False
    for ch in text:
        if ch == "<":
            in_tag = True
        if not in_tag:
            out.append(ch)
        if ch == ">":
            in_tag = False
    return "".join(out)


def format_text(
    fragment: str,
    deletes: Iterable[str] = (),
    *,
    convert_breaks: bool = False,
) -> str:
    """Turn an extracted fragment into output text.

    With *convert_breaks*, ``<br>`` tags become newlines and ``&nbsp;``
    becomes a space before markup is stripped.  Each string in *deletes* is
    then removed, in order.
    """
    if convert_breaks:
        fragment = _BREAK_TAG.sub("\n", fragment).replace("&nbsp;", " ")
    text = strip_tags(fragment)
    for pattern in deletes:
        if pattern:
            text = text.replace(pattern, "")
    return text
