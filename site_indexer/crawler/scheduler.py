# === FILE: site_indexer/crawler/scheduler.py ===
from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, List, Optional

from site_indexer.aggregator import CrawlReport, PageOutcome
from site_indexer.crawler.frontier import Frontier
from site_indexer.crawler.links import LinkDiscoverer
from site_indexer.crawler.renderer import RenderedPage, Renderer
from site_indexer.index.sink import IndexSink
from site_indexer.logger import get_logger
from site_indexer.models import CrawlRequest, Document

if TYPE_CHECKING:
    from site_indexer.extraction.base import ExtractionStrategy

__all__ = ("Scheduler", "DEFAULT_CONCURRENCY")

logger = get_logger("scheduler")

DEFAULT_CONCURRENCY = 5


class Scheduler:
    """Фиксированный пул воркеров, разбирающих фронтир до его исчерпания.

    Каждый воркер обрабатывает один запрос за раз, поэтому число одновременно
    выполняемых запросов никогда не превышает ``concurrency``.
    """

    def __init__(
        self,
        frontier: Frontier,
        renderer: Renderer,
        strategy: ExtractionStrategy,
        discoverer: LinkDiscoverer,
        sink: IndexSink,
        index_name: str,
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
        request_timeout: Optional[float] = None,
        report: Optional[CrawlReport] = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.frontier = frontier
        self.renderer = renderer
        self.strategy = strategy
        self.discoverer = discoverer
        self.sink = sink
        self.index_name = index_name
        self.concurrency = concurrency
        self.request_timeout = request_timeout
        self.report = report if report is not None else CrawlReport(index_name=index_name, strategy=strategy.name)
        self.active = 0
        self.peak_active = 0

    async def run(self) -> CrawlReport:
        logger.info("Старт обхода: %d в очереди, параллельность %d", len(self.frontier), self.concurrency)
        start = time.monotonic()
        workers: List[asyncio.Task] = [
            asyncio.create_task(self._worker(i), name=f"crawl-worker-{i}") for i in range(self.concurrency)
        ]
        try:
            await asyncio.gather(*workers)
        finally:
            for w in workers:
                if not w.done():
                    w.cancel()
            await asyncio.gather(*workers, return_exceptions=True)
        self.report.finish()
        duration = time.monotonic() - start
        processed = len(self.report.pages)
        logger.info(
            "Завершено: %d страниц за %.2f с (%.2f стр/с), проиндексировано %d, ошибок записи %d, отброшено %d",
            processed,
            duration,
            processed / duration if duration else 0,
            self.report.indexed_count,
            self.report.index_failures,
            len(self.report.failures),
        )
        return self.report

    async def _worker(self, worker_id: int) -> None:
        while True:
            request = await self.frontier.get()
            if request is None:
                logger.debug("Worker %d: frontier drained", worker_id)
                return
            self.active += 1
            self.peak_active = max(self.peak_active, self.active)
            try:
                if self.request_timeout is not None:
                    await asyncio.wait_for(self.process(request), timeout=self.request_timeout)
                else:
                    await self.process(request)
            except asyncio.TimeoutError:
                logger.warning("Timed out after %.1f s: %s", self.request_timeout, request.url)
                self.report.record_failure(request.url, "timeout", f"exceeded {self.request_timeout} s")
            except Exception as exc:  # pylint: disable=broad-except
                logger.exception("Unexpected error while processing %s", request.url)
                self.report.record_failure(request.url, "internal", exc)
            finally:
                self.active -= 1
                await self.frontier.task_done()

    async def process(self, request: CrawlRequest) -> Optional[Document]:
        """One unit of work: render, extract, discover links, release the page, write."""
        logger.info("Now processing: %s", request.url)
        try:
            page = await self.renderer.render(request.url)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Render failed, dropping %s: %s", request.url, exc)
            self.report.record_failure(request.url, "render", exc)
            return None

        try:
            loaded_url = page.url or request.url
            html = await self._snapshot(page, loaded_url)
            text = await self.strategy.extract(page)
            title = await self._title(page, loaded_url)
            links_found = await self.discoverer.discover(html, loaded_url, request)
        finally:
            await self._release(page, request.url)

        document = Document.build(title=title, content=text, url=loaded_url)
        indexed = await self.sink.write(document, self.index_name)
        self.report.record_page(
            PageOutcome(
                url=loaded_url,
                title=document.title,
                content_length=len(document.content),
                indexed=indexed,
                links_found=links_found,
            )
        )
        return document

    @staticmethod
    async def _snapshot(page: RenderedPage, url: str) -> str:
        # taken before extraction, which may remove navigation from the live DOM
        try:
            return await page.content()
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Cannot read markup of %s, links skipped: %s", url, exc)
            return ""

    @staticmethod
    async def _title(page: RenderedPage, url: str) -> str:
        try:
            return (await page.title()) or ""
        except Exception as exc:  # pylint: disable=broad-except
            logger.debug("No title for %s: %s", url, exc)
            return ""

    @staticmethod
    async def _release(page: RenderedPage, url: str) -> None:
        try:
            await page.close()
        except Exception as exc:  # pylint: disable=broad-except
            logger.debug("Error closing page %s: %s", url, exc)
