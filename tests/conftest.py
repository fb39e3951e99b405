# File: tests/conftest.py
from __future__ import annotations

import asyncio
from typing import Dict, Iterable, List, Optional, Union

import pytest
from bs4 import BeautifulSoup

from site_indexer.config import IndexerConfig
from site_indexer.errors import RenderError

BASE = "https://example.org"


class FakePage:
    """RenderedPage over static HTML; DOM operations are done with BeautifulSoup."""

    def __init__(self, url: str, html: str, *, fail_content: bool = False, fail_title: bool = False) -> None:
        self.url = url
        self._soup = BeautifulSoup(html, "lxml")
        self.fail_content = fail_content
        self.fail_title = fail_title
        self.closed = False
        self.load_states: List[str] = []

    async def title(self) -> str:
        if self.fail_title:
            raise RuntimeError("title unavailable")
        tag = self._soup.title
        return tag.get_text(strip=True) if tag else ""

    async def content(self) -> str:
        if self.fail_content:
            raise RuntimeError("page crashed")
        return str(self._soup)

    async def wait_for_load_state(self, state: str = "networkidle", timeout: Optional[float] = None) -> None:
        self.load_states.append(state)

    async def remove(self, selector: str) -> int:
        elements = self._soup.select(selector)
        for element in elements:
            if not element.decomposed:
                element.decompose()
        return len(elements)

    async def inner_text(self, selector: str = "body") -> str:
        element = self._soup.select_one(selector)
        return element.get_text(" ") if element else ""

    async def text_content(self, selector: str = "body") -> str:
        element = self._soup.select_one(selector)
        return element.get_text() if element else ""

    async def close(self) -> None:
        self.closed = True


SiteEntry = Union[str, Exception]


class FakeRenderer:
    """
    Serves *site* (normalized URL -> HTML or exception). Unknown URLs behave
    like HTTP 404. Tracks calls and the peak number of concurrent renders.
    """

    def __init__(
        self,
        site: Dict[str, SiteEntry],
        *,
        delay: float = 0.0,
        redirects: Optional[Dict[str, str]] = None,
        slow: Optional[Dict[str, float]] = None,
    ) -> None:
        self.site = site
        self.delay = delay
        self.redirects = redirects or {}
        self.slow = slow or {}
        self.calls: List[str] = []
        self.pages: List[FakePage] = []
        self.active = 0
        self.peak = 0
        self.entered = False
        self.exited = False

    async def __aenter__(self) -> FakeRenderer:
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.exited = True

    async def render(self, url: str) -> FakePage:
        self.calls.append(url)
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(self.slow.get(url, self.delay))
            loaded = self.redirects.get(url, url)
            entry = self.site.get(loaded)
            if entry is None:
                raise RenderError(url, "HTTP 404", 404)
            if isinstance(entry, Exception):
                raise entry
            page = FakePage(loaded, entry)
            self.pages.append(page)
            return page
        finally:
            self.active -= 1


class FakeIndexClient:
    """Stands in for AsyncElasticsearch.index(); fails for URLs in *fail_urls*."""

    def __init__(self, fail_urls: Iterable[str] = (), delay: float = 0.0) -> None:
        self.fail_urls = set(fail_urls)
        self.delay = delay
        self.calls: List[tuple] = []
        self.documents: List[dict] = []

    async def index(self, *, index: str, document: dict) -> dict:
        self.calls.append((index, document))
        if self.delay:
            await asyncio.sleep(self.delay)
        if document["url"] in self.fail_urls:
            raise ConnectionError("index unavailable")
        self.documents.append(document)
        return {"result": "created"}

    def urls(self) -> List[str]:
        return [doc["url"] for doc in self.documents]


class FakeCodeGenerator:
    def __init__(self, answer: Union[str, Exception]) -> None:
        self.answer = answer
        self.prompts: List[str] = []

    async def generate(self, markup: str) -> str:
        self.prompts.append(markup)
        if isinstance(self.answer, Exception):
            raise self.answer
        return self.answer


def page_html(title: str, body: str) -> str:
    return f"<html><head><title>{title}</title></head><body>{body}</body></html>"


def links_html(title: str, *hrefs: str, text: str = "") -> str:
    anchors = "".join(f'<a href="{href}">{href}</a> ' for href in hrefs)
    return page_html(title, f"<main><p>{text or title}</p>{anchors}</main>")


GOOD_SOURCE = '''
import re

NON_CONTENT = ["script", "style", "iframe", "nav", "header", "footer", "aside", "noscript", "form"]


async def extract_text(page):
    """Remove chrome, return body text."""
    await page.wait_for_load_state("networkidle")
    for selector in NON_CONTENT:
        await page.remove(selector)
    text = await page.inner_text("body")
    return re.sub(r"\\s+", " ", text).strip()
'''


# --------------------------------------------------------------------------- #
#                                  Fixtures                                   #
# --------------------------------------------------------------------------- #


@pytest.fixture()
def index_client() -> FakeIndexClient:
    return FakeIndexClient()


@pytest.fixture()
def small_site() -> Dict[str, str]:
    """
    Root links to /a, /b and /c; every child links back to root and to its
    siblings, so every page is discovered several times.
    """
    return {
        f"{BASE}/": links_html("Home", "/a", "/b", "/c", "#top"),
        f"{BASE}/a": links_html("A", "/", "/b", "c"),
        f"{BASE}/b": links_html("B", "/", "/a", "/c?x=1#frag"),
        f"{BASE}/c": links_html("C", "/", "/a", "https://other.example.com/"),
        f"{BASE}/c?x=1": links_html("C1", "/c"),
    }


@pytest.fixture()
def basic_config() -> IndexerConfig:
    """
    Return a basic valid IndexerConfig for engine tests.
    """
    return IndexerConfig(base_url=f"{BASE}/", index_name="test_index", concurrency=3)
