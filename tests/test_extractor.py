"""Tests for boundary extraction, tag stripping and text formatting."""

from __future__ import annotations

import pytest

from pagechain.scraper.errors import BoundaryError, ErrorKind
from pagechain.scraper.extractor import extract_between, format_text, strip_tags


# ---------------------------------------------------------------------------
# extract_between
# ---------------------------------------------------------------------------

class TestExtractBetween:
    def test_returns_text_strictly_between_markers(self) -> None:
        text = '<body><div id="nr1">Once upon a time</div><p class="chapter-page-info">'
        assert extract_between(text, '<div id="nr1">', '<p class="chapter-page-info">') == (
            "Once upon a time</div>"
        )

    def test_reinserting_fragment_reproduces_span(self) -> None:
        text = "header [[START]] the <b>body</b> [[END]] footer"
        fragment = extract_between(text, "[[START]]", "[[END]]")
        assert "[[START]]" + fragment + "[[END]]" in text

    def test_first_start_marker_wins(self) -> None:
        text = "<i>one</i> <i>two</i>"
        assert extract_between(text, "<i>", "</i>") == "one"

    def test_adjacent_markers_give_empty_string(self) -> None:
        assert extract_between("ab[]cd", "[", "]") == ""

    def test_missing_start_marker(self) -> None:
        with pytest.raises(BoundaryError) as excinfo:
            extract_between("no markers here", "<article>", "</article>")
        assert excinfo.value.kind is ErrorKind.START_NOT_FOUND
        assert excinfo.value.marker == "<article>"

    def test_missing_end_marker(self) -> None:
        with pytest.raises(BoundaryError) as excinfo:
            extract_between("<article>text without end", "<article>", "</article>")
        assert excinfo.value.kind is ErrorKind.END_NOT_FOUND
        assert excinfo.value.marker == "</article>"

    def test_end_marker_before_start_is_not_matched(self) -> None:
        text = "</article> stray end, then <article>open but never closed"
        with pytest.raises(BoundaryError) as excinfo:
            extract_between(text, "<article>", "</article>")
        assert excinfo.value.kind is ErrorKind.END_NOT_FOUND

    def test_end_marker_overlapping_start_is_not_matched(self) -> None:
        # The end marker occurs inside the start marker itself.
        with pytest.raises(BoundaryError):
            extract_between("<<x>>", "<<x>", ">>")

    def test_error_message_names_marker(self) -> None:
        with pytest.raises(BoundaryError) as excinfo:
            extract_between("abc", "START", "END")
        assert "content-start" in str(excinfo.value)
        assert "START" in str(excinfo.value)


# ---------------------------------------------------------------------------
# strip_tags
# ---------------------------------------------------------------------------

class TestStripTags:
    def test_removes_tags(self) -> None:
        assert strip_tags("a<b>c</b>d") == "acd"

    def test_plain_text_unchanged(self) -> None:
        assert strip_tags("no tags") == "no tags"

    def test_unterminated_tag_swallows_rest(self) -> None:
        assert strip_tags("a<unterminated") == "a"

    def test_stray_closing_bracket_is_kept(self) -> None:
        assert strip_tags("3 > 2") == "3 > 2"

    def test_empty_input(self) -> None:
        assert strip_tags("") == ""

    def test_keeps_entities_and_whitespace(self) -> None:
        assert strip_tags("<p>line one&nbsp;</p>\n<p>line two</p>") == "line one&nbsp;\nline two"

    def test_multibyte_text(self) -> None:
        assert strip_tags("<p>第一章</p><br />正文") == "第一章正文"


# ---------------------------------------------------------------------------
# format_text
# ---------------------------------------------------------------------------

class TestFormatText:
    def test_defaults_to_strip_tags(self) -> None:
        fragment = "<p>Hello</p><br/>world"
        assert format_text(fragment) == strip_tags(fragment)

    def test_deletes_are_removed_in_order(self) -> None:
        fragment = "<p>Chapter 1 [ad] text [ad]</p>"
        assert format_text(fragment, ["[ad]", "  "]) == "Chapter 1 text "

    def test_empty_delete_is_ignored(self) -> None:
        assert format_text("<b>x</b>", [""]) == "x"

    def test_convert_breaks(self) -> None:
        fragment = "one<br />two<BR>three&nbsp;four<br/>"
        assert format_text(fragment, convert_breaks=True) == "one\ntwo\nthree four\n"

    def test_breaks_kept_as_tags_without_conversion(self) -> None:
        assert format_text("one<br />two") == "onetwo"
