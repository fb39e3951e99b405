# File: site_indexer/extraction/base.py
"""Extraction strategy interface and the text clean-up shared by all variants."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Final, FrozenSet

from site_indexer.crawler.renderer import RenderedPage
from site_indexer.logger import get_logger

__all__ = ("NON_CONTENT_TAGS", "ExtractionStrategy", "collapse_whitespace")

logger = get_logger("extraction")

NON_CONTENT_TAGS: Final[FrozenSet[str]] = frozenset(
    {
        "script",
        "style",
        "iframe",
        "nav",
        "header",
        "footer",
        "aside",
        "noscript",
        "form",
        "link",
        "meta",
        "button",
        "input",
    }
)

_WS_RE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    """``"a   b\\n\\nc"`` -> ``"a b c"``."""
    return _WS_RE.sub(" ", text).strip()


class ExtractionStrategy(ABC):
    """Turns a rendered page into plain text.

    :meth:`extract` never raises: a failing variant degrades to ``""`` so the
    page is still indexed with empty content.
    """

    name: str = "abstract"

    async def extract(self, page: RenderedPage) -> str:
        try:
            text = await self._extract(page)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Extraction (%s) failed on %s: %s", self.name, page.url, exc)
            return ""
        if not isinstance(text, str):
            logger.warning(
                "Extraction (%s) returned %s instead of str on %s", self.name, type(text).__name__, page.url
            )
            return ""
        return collapse_whitespace(text)

    @abstractmethod
    async def _extract(self, page: RenderedPage) -> str:
        """Variant-specific extraction; may raise."""
