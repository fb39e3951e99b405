# File: site_indexer/models.py
"""
Data models for the SiteIndexer crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from site_indexer.utils import utc_timestamp

__all__ = ("CrawlRequest", "Document")


@dataclass(frozen=True, slots=True)
class CrawlRequest:
    """A pending page visit.

    ``url`` is the resolved target as linked (fragment removed) and is what the
    renderer loads. ``key`` is its normalized form, the dedupe identity.
    """

    url: str
    origin_url: Optional[str] = None
    depth: int = 0
    key: str = field(default="", compare=False)


@dataclass(frozen=True, slots=True)
class Document:
    """Extracted page ready for the search index."""

    title: str
    content: str
    url: str
    crawled_at: str = field(default_factory=utc_timestamp)

    @classmethod
    def build(cls, *, title: Optional[str], content: Optional[str], url: str) -> Document:
        """Build a document stamped with the current time; ``None`` becomes ``""``."""
        return cls(title=title or "", content=content or "", url=url)

    def to_body(self) -> Dict[str, str]:
        """Index write schema: exactly title, content, url and crawledAt."""
        return {
            "title": self.title,
            "content": self.content,
            "url": self.url,
            "crawledAt": self.crawled_at,
        }
