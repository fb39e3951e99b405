# File: tests/test_extraction.py
import pytest
from conftest import FakePage, page_html

from site_indexer.extraction.base import ExtractionStrategy, collapse_whitespace
from site_indexer.extraction.static import StaticRuleStrategy, html_to_text

URL = "https://example.org/"

NOISY = page_html(
    "Noisy",
    """
    <header><h1>Site header</h1></header>
    <nav><a href="/a">Menu link</a></nav>
    <script>var tracking = 1;</script>
    <style>body { color: red }</style>
    <main>
      <h2>Article   title</h2>
      <p>First

      paragraph.</p>
      <noscript>Enable JS</noscript>
      <form><input value="q"><button>Go</button></form>
    </main>
    <aside>Related</aside>
    <footer>Copyright</footer>
    """,
)


def test_collapse_whitespace():
    assert collapse_whitespace("a   b\n\nc") == "a b c"
    assert collapse_whitespace("  \t\n ") == ""


def test_html_to_text_drops_non_content_tags():
    text = collapse_whitespace(html_to_text(NOISY))
    assert text == "Article title First paragraph."


@pytest.mark.parametrize(
    "body,expected",
    [
        ("<p>Hel<b>lo</b> wor<span>ld</span></p>", "Hello world"),
        ("<p>one</p><p>two</p>", "one two"),
        ("<ul><li>a</li><li>b</li></ul>line<br>break", "a b line break"),
        ("<table><tr><td>x</td><td>y</td></tr></table>", "x y"),
        ("<div>see <a href='/x'>the</a>docs</div>", "see thedocs"),
    ],
)
def test_html_to_text_separates_blocks_not_inline_tags(body, expected):
    assert collapse_whitespace(html_to_text(page_html("t", body))) == expected


def test_html_to_text_custom_rules():
    text = collapse_whitespace(html_to_text(NOISY, removal_tags={"script", "style"}))
    assert "Menu link" in text
    assert "tracking" not in text


@pytest.mark.asyncio()
async def test_static_strategy_extracts_clean_text():
    strategy = StaticRuleStrategy()
    assert strategy.name == "static"
    assert await strategy.extract(FakePage(URL, NOISY)) == "Article title First paragraph."


@pytest.mark.asyncio()
async def test_static_strategy_empty_body():
    strategy = StaticRuleStrategy()
    assert await strategy.extract(FakePage(URL, "<html><head><title>t</title></head><body></body></html>")) == ""
    assert await strategy.extract(FakePage(URL, page_html("t", "<script>only()</script>"))) == ""


@pytest.mark.asyncio()
async def test_static_strategy_degrades_to_empty_text_on_page_error():
    page = FakePage(URL, NOISY, fail_content=True)
    assert await StaticRuleStrategy().extract(page) == ""


@pytest.mark.asyncio()
async def test_non_string_result_becomes_empty_text():
    class Numbers(ExtractionStrategy):
        name = "numbers"

        async def _extract(self, page):
            return 42

    assert await Numbers().extract(FakePage(URL, NOISY)) == ""
