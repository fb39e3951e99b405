# File: site_indexer/extraction/static.py
"""Rule-based extraction: drop non-content tags from the markup, keep body text."""

from __future__ import annotations

from typing import FrozenSet, Iterable, Optional

from bs4 import BeautifulSoup

from site_indexer.crawler.renderer import RenderedPage
from site_indexer.extraction.base import NON_CONTENT_TAGS, ExtractionStrategy

__all__ = ("StaticRuleStrategy", "DEFAULT_REMOVAL_TAGS", "BLOCK_TAGS", "html_to_text")

DEFAULT_REMOVAL_TAGS: FrozenSet[str] = NON_CONTENT_TAGS | {"template", "svg", "select", "textarea"}


#: elements that break the text flow; inline tags (b, a, span, ...) do not
BLOCK_TAGS: FrozenSet[str] = frozenset(
    {
        "address", "article", "blockquote", "br", "caption", "dd", "details", "dialog", "div",
        "dl", "dt", "fieldset", "figcaption", "figure", "h1", "h2", "h3", "h4", "h5", "h6",
        "hr", "li", "main", "ol", "p", "pre", "section", "summary", "table", "td", "th", "tr", "ul",
    }
)


def html_to_text(html: str, removal_tags: Iterable[str] = DEFAULT_REMOVAL_TAGS) -> str:
    """
    Body text of *html* without the given tags; whitespace is not collapsed here.

    Separators go only around block-level elements, so ``Hel<b>lo</b>`` stays
    ``Hello`` while ``<p>a</p><p>b</p>`` becomes ``a b``.
    """
    soup = BeautifulSoup(html, "lxml")
    for element in soup.find_all(list(removal_tags)):
        # nested matches are gone with their parent
        if not element.decomposed:
            element.decompose()
    body = soup.body
    if body is None:
        return ""
    for element in body.find_all(list(BLOCK_TAGS)):
        element.insert_before(" ")
        element.insert_after(" ")
    return body.get_text()


class StaticRuleStrategy(ExtractionStrategy):
    """Fixed removal rule set applied to a snapshot of the rendered DOM."""

    name = "static"

    def __init__(self, removal_tags: Optional[Iterable[str]] = None) -> None:
        self.removal_tags: FrozenSet[str] = (
            frozenset(removal_tags) if removal_tags is not None else DEFAULT_REMOVAL_TAGS
        )

    async def _extract(self, page: RenderedPage) -> str:
        return html_to_text(await page.content(), self.removal_tags)
