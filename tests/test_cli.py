"""Tests for the pagechain CLI (``crawl`` and ``probe``).

Mocking strategy:
- ``respx`` patches ``httpx`` so the real ``HttpFetcher`` is exercised
  without network access.
- Crawl documents are passed on stdin or written to ``tmp_path``.
"""

from __future__ import annotations

import json

import httpx
import respx
from typer.testing import CliRunner

from cli.main import app

runner = CliRunner()

_BOOK = "http://site.com/book/"


def _page(body: str, next_href: str) -> str:
    return (
        f'<html><body><div id="content"><p>{body}</p></div>'
        f'<a id="next" href="{next_href}">Next</a></body></html>'
    )


def _doc(**source) -> str:
    doc = {
        "source": {
            "url": _BOOK + "1.html",
            "next": '<a id="next" href="|">',
            "auto-fetch": True,
        },
        "filter": {"content-start": '<div id="content">', "content-end": "</div>"},
    }
    doc["source"].update(source)
    return json.dumps(doc)


# ---------------------------------------------------------------------------
# crawl
# ---------------------------------------------------------------------------

class TestCrawlCommand:
    def test_prints_every_page(self) -> None:
        with respx.mock:
            respx.get(_BOOK + "1.html").mock(
                return_value=httpx.Response(200, text=_page("Chapter one", "2.html"))
            )
            respx.get(_BOOK + "2.html").mock(
                return_value=httpx.Response(200, text=_page("Chapter two", ""))
            )
            result = runner.invoke(app, ["crawl"], input=_doc())

        assert result.exit_code == 0
        assert "Chapter one" in result.stdout
        assert "Chapter two" in result.stdout
        assert result.stdout.index("Chapter one") < result.stdout.index("Chapter two")

    def test_reads_config_file_and_writes_output_file(self, tmp_path) -> None:
        config = tmp_path / "book.json"
        config.write_text(_doc(), encoding="utf-8")
        out = tmp_path / "out" / "book.txt"

        with respx.mock:
            respx.get(_BOOK + "1.html").mock(
                return_value=httpx.Response(200, text=_page("Chapter one", "2.html"))
            )
            respx.get(_BOOK + "2.html").mock(
                return_value=httpx.Response(200, text=_page("Chapter two", ""))
            )
            result = runner.invoke(
                app, ["crawl", "--config", str(config), "--output", str(out), "--with-url"]
            )

        assert result.exit_code == 0
        assert out.read_text(encoding="utf-8") == (
            f"# {_BOOK}1.html\nChapter one\n# {_BOOK}2.html\nChapter two\n"
        )

    def test_auto_fetch_off(self) -> None:
        with respx.mock(assert_all_called=False) as respx_mock:
            respx_mock.get(_BOOK + "1.html").mock(
                return_value=httpx.Response(200, text=_page("Chapter one", "2.html"))
            )
            second = respx_mock.get(_BOOK + "2.html").mock(
                return_value=httpx.Response(200, text=_page("Chapter two", ""))
            )
            result = runner.invoke(app, ["crawl"], input=_doc(**{"auto-fetch": False}))

        assert result.exit_code == 0
        assert "Chapter one" in result.stdout
        assert not second.called

    def test_max_pages(self) -> None:
        with respx.mock(assert_all_called=False) as respx_mock:
            respx_mock.get(_BOOK + "1.html").mock(
                return_value=httpx.Response(200, text=_page("Chapter one", "2.html"))
            )
            second = respx_mock.get(_BOOK + "2.html").mock(
                return_value=httpx.Response(200, text=_page("Chapter two", ""))
            )
            result = runner.invoke(app, ["crawl", "--max-pages", "1"], input=_doc())

        assert result.exit_code == 0
        assert not second.called

    def test_fetch_failure_exit_code(self) -> None:
        with respx.mock:
            route = respx.get(_BOOK + "1.html").mock(return_value=httpx.Response(404))
            result = runner.invoke(app, ["crawl", "--attempts", "2"], input=_doc())

        assert result.exit_code == 3
        assert route.call_count == 2

    def test_malformed_pattern_exit_code(self) -> None:
        with respx.mock:
            respx.get(_BOOK + "1.html").mock(
                return_value=httpx.Response(200, text=_page("Chapter one", ""))
            )
            result = runner.invoke(app, ["crawl"], input=_doc(next="no separator"))

        assert result.exit_code == 4

    def test_missing_boundary_exit_code(self) -> None:
        with respx.mock:
            respx.get(_BOOK + "1.html").mock(
                return_value=httpx.Response(200, text='<a id="next" href="">x</a>')
            )
            result = runner.invoke(app, ["crawl"], input=_doc())

        assert result.exit_code == 5

    def test_invalid_document_exit_code(self) -> None:
        result = runner.invoke(app, ["crawl"], input="{broken")
        assert result.exit_code == 2

    def test_unreadable_document_exit_code(self, tmp_path) -> None:
        result = runner.invoke(app, ["crawl", "--config", str(tmp_path / "missing.json")])
        assert result.exit_code == 1

    def test_zero_deadline_cancels(self) -> None:
        result = runner.invoke(app, ["crawl", "--deadline", "0"], input=_doc())
        assert result.exit_code == 6


# ---------------------------------------------------------------------------
# probe
# ---------------------------------------------------------------------------

class TestProbeCommand:
    def test_shows_next_link_without_following_it(self) -> None:
        with respx.mock(assert_all_called=False) as respx_mock:
            respx_mock.get(_BOOK + "1.html").mock(
                return_value=httpx.Response(200, text=_page("Chapter one", "2.html"))
            )
            second = respx_mock.get(_BOOK + "2.html").mock(
                return_value=httpx.Response(200, text=_page("Chapter two", ""))
            )
            result = runner.invoke(app, ["probe"], input=_doc())

        assert result.exit_code == 0
        assert _BOOK + "2.html" in result.stdout
        assert "Chapter one" in result.stdout
        assert not second.called

    def test_probe_other_url(self) -> None:
        with respx.mock:
            respx.get(_BOOK + "7.html").mock(
                return_value=httpx.Response(200, text=_page("Chapter seven", ""))
            )
            result = runner.invoke(app, ["probe", "--url", _BOOK + "7.html"], input=_doc())

        assert result.exit_code == 0
        assert "last page" in result.stdout
        assert "Chapter seven" in result.stdout

    def test_probe_reports_missing_link(self) -> None:
        with respx.mock:
            respx.get(_BOOK + "1.html").mock(
                return_value=httpx.Response(200, text="<html>nothing</html>")
            )
            result = runner.invoke(app, ["probe"], input=_doc())

        assert result.exit_code == 4
