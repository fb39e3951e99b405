# File: site_indexer/crawler/renderer.py
"""Headless rendering: a narrow page interface and its Playwright implementation."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from site_indexer.errors import RenderError
from site_indexer.logger import get_logger

__all__ = ("RenderedPage", "Renderer", "PlaywrightPage", "PlaywrightRenderer")

logger = get_logger("renderer")


@runtime_checkable
class RenderedPage(Protocol):
    """A loaded page. Owned by one unit of work and closed when it is done."""

    @property
    def url(self) -> str: ...

    async def title(self) -> str: ...

    async def content(self) -> str: ...

    async def wait_for_load_state(self, state: str = "networkidle", timeout: Optional[float] = None) -> None: ...

    async def remove(self, selector: str) -> int: ...

    async def inner_text(self, selector: str = "body") -> str: ...

    async def text_content(self, selector: str = "body") -> str: ...

    async def close(self) -> None: ...


class Renderer(Protocol):
    async def render(self, url: str) -> RenderedPage: ...


class PlaywrightPage:
    """:class:`RenderedPage` over a Playwright :class:`~playwright.async_api.Page`."""

    _REMOVE_JS = "els => { els.forEach(el => el.remove()); return els.length; }"

    def __init__(self, page: Page) -> None:
        self._page = page

    @property
    def url(self) -> str:
        return self._page.url

    async def title(self) -> str:
        return await self._page.title()

    async def content(self) -> str:
        return await self._page.content()

    async def wait_for_load_state(self, state: str = "networkidle", timeout: Optional[float] = None) -> None:
        """Wait for *state*; *timeout* is in milliseconds. Timing out is not an error."""
        try:
            await self._page.wait_for_load_state(state, timeout=timeout)
        except PlaywrightTimeoutError:
            logger.debug("Load state %r not reached on %s, continuing", state, self.url)

    async def remove(self, selector: str) -> int:
        """Detach every element matching *selector*; returns how many were removed."""
        return int(await self._page.eval_on_selector_all(selector, self._REMOVE_JS))

    async def inner_text(self, selector: str = "body") -> str:
        if await self._page.query_selector(selector) is None:
            return ""
        return await self._page.inner_text(selector)

    async def text_content(self, selector: str = "body") -> str:
        if await self._page.query_selector(selector) is None:
            return ""
        return await self._page.text_content(selector) or ""

    async def close(self) -> None:
        if not self._page.is_closed():
            await self._page.close()


class PlaywrightRenderer:
    """One Chromium instance shared by all workers; one browser page per request.

    Usage::

        async with PlaywrightRenderer(navigation_timeout=30) as renderer:
            page = await renderer.render("https://example.org/")
    """

    def __init__(
        self,
        *,
        headless: bool = True,
        user_agent: Optional[str] = None,
        navigation_timeout: float = 30.0,
        wait_until: str = "load",
    ) -> None:
        self.headless = headless
        self.user_agent = user_agent
        self.navigation_timeout = navigation_timeout
        self.wait_until = wait_until
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    async def __aenter__(self) -> PlaywrightRenderer:
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=self.headless)
        self._context = await self._browser.new_context(user_agent=self.user_agent)
        self._context.set_default_navigation_timeout(self.navigation_timeout * 1000)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._context is not None:
            await self._context.close()
        if self._browser is not None:
            await self._browser.close()
        if self._playwright is not None:
            await self._playwright.stop()
        self._context = self._browser = self._playwright = None

    async def render(self, url: str) -> PlaywrightPage:
        if self._context is None:
            raise RuntimeError("Renderer not started; use 'async with PlaywrightRenderer()'")
        page = await self._context.new_page()
        try:
            response = await page.goto(url, wait_until=self.wait_until)
        except PlaywrightError as exc:
            await page.close()
            raise RenderError(url, str(exc).splitlines()[0] if str(exc) else type(exc).__name__) from exc
        if response is not None and response.status >= 400:
            await page.close()
            raise RenderError(url, f"HTTP {response.status}", response.status)
        return PlaywrightPage(page)
