# File: site_indexer/crawler/links.py
"""
Link discovery: extract anchor targets from rendered markup and feed the frontier.
"""
from __future__ import annotations

from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from site_indexer.crawler.frontier import Frontier
from site_indexer.logger import get_logger
from site_indexer.models import CrawlRequest
from site_indexer.utils import resolve_url, same_host

__all__ = ("extract_links", "LinkDiscoverer")

logger = get_logger("links")


def extract_links(html: str, base_url: str) -> List[str]:
    """
    Return absolute HTTP(S) targets of all ``<a href>`` tags, in document order.

    Each href is resolved against *base_url* (the URL that was actually loaded)
    with RFC 3986 rules, so ``/about`` on ``https://example.org/dept/page``
    becomes ``https://example.org/about``. Malformed and non-http hrefs are
    skipped.
    """
    soup = BeautifulSoup(html, "lxml")
    links: List[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        absolute = resolve_url(href_val, base_url)
        if absolute is not None:
            links.append(absolute)
    return links


class LinkDiscoverer:
    """Best-effort discovery; a failure here never fails the enclosing request."""

    def __init__(self, frontier: Frontier, *, same_host_only: bool = True) -> None:
        self.frontier = frontier
        self.same_host_only = same_host_only

    async def discover(self, html: str, base_url: str, parent: Optional[CrawlRequest] = None) -> int:
        """Enqueue every link found in *html*; returns the number of new requests."""
        try:
            links = extract_links(html, base_url)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Link extraction failed for %s: %s", base_url, exc)
            return 0
        if self.same_host_only:
            links = [link for link in links if same_host(link, base_url)]
        depth = parent.depth + 1 if parent is not None else 1
        added = await self.frontier.enqueue_many(links, base_url, depth=depth)
        logger.debug("%s: %d links, %d new", base_url, len(links), len(added))
        return len(added)
