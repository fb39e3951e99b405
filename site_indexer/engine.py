# File: site_indexer/engine.py
"""site_indexer.engine: сборка стратегии, запуск браузера и обхода."""

from __future__ import annotations

from contextlib import AsyncExitStack
from typing import Optional

from openai import AsyncOpenAI

from site_indexer.aggregator import CrawlReport
from site_indexer.config import Credentials, IndexerConfig
from site_indexer.crawler.fetcher import fetch_markup
from site_indexer.crawler.frontier import Frontier
from site_indexer.crawler.links import LinkDiscoverer
from site_indexer.crawler.renderer import PlaywrightRenderer, Renderer
from site_indexer.crawler.scheduler import Scheduler
from site_indexer.errors import ConfigurationError, StartupError
from site_indexer.extraction.base import ExtractionStrategy
from site_indexer.extraction.codegen import CodeGenerator, OpenAICodeGenerator
from site_indexer.extraction.generated import MarkupFetcher, build_generated_strategy
from site_indexer.extraction.static import StaticRuleStrategy
from site_indexer.index.sink import IndexClient, IndexSink, create_elasticsearch_client
from site_indexer.logger import logger

__all__ = ["Engine", "start_crawl"]


class Engine:
    """Фасад для CLI и тестов: все внешние клиенты передаются явно."""

    def __init__(
        self,
        config: IndexerConfig,
        *,
        index_client: IndexClient,
        renderer: Renderer,
        code_generator: Optional[CodeGenerator] = None,
        markup_fetcher: MarkupFetcher = fetch_markup,
    ) -> None:
        self.config = config
        self.index_client = index_client
        self.renderer = renderer
        self.code_generator = code_generator
        self.markup_fetcher = markup_fetcher

    async def build_strategy(self) -> ExtractionStrategy:
        """Собирает стратегию извлечения один раз, до начала обхода."""
        if self.config.strategy == "static":
            return StaticRuleStrategy()
        if self.code_generator is None:
            raise ConfigurationError("The generated strategy needs a code generator")
        return await build_generated_strategy(
            str(self.config.base_url),
            self.code_generator,
            fetch=self.markup_fetcher,
            timeout=self.config.sample_timeout,
            user_agent=self.config.user_agent,
            max_chars=self.config.max_sample_chars,
        )

    async def run(self) -> CrawlReport:
        """Запускает обход. Ошибки сборки стратегии всплывают до первого рендера."""
        cfg = self.config
        try:
            strategy = await self.build_strategy()
        except (ConfigurationError, StartupError) as exc:
            logger.error("Crawl not started: %s", exc)
            raise
        logger.info("Extraction strategy: %s", strategy.name)

        frontier = Frontier(max_requests=cfg.max_pages, max_depth=cfg.max_depth)
        seed = await frontier.enqueue(str(cfg.base_url))
        if seed is None:
            raise ConfigurationError(f"Seed URL is not crawlable: {cfg.base_url}")

        report = CrawlReport(base_url=seed.url, index_name=cfg.index_name, strategy=strategy.name)
        scheduler = Scheduler(
            frontier,
            self.renderer,
            strategy,
            LinkDiscoverer(frontier, same_host_only=cfg.same_host_only),
            IndexSink(self.index_client),
            cfg.index_name,
            concurrency=cfg.concurrency,
            request_timeout=cfg.request_timeout,
            report=report,
        )
        async with AsyncExitStack() as stack:
            if hasattr(self.renderer, "__aenter__"):
                await stack.enter_async_context(self.renderer)  # type: ignore[arg-type]
            return await scheduler.run()


async def start_crawl(config: IndexerConfig, credentials: Credentials) -> CrawlReport:
    """Создаёт реальные клиенты (Elasticsearch, Playwright, OpenAI) и запускает обход."""
    credentials.require_index()
    if config.strategy == "generated":
        credentials.require_codegen()

    es = create_elasticsearch_client(credentials.es_endpoint, credentials.es_api_key)
    openai_client: Optional[AsyncOpenAI] = None
    generator: Optional[CodeGenerator] = None
    if config.strategy == "generated":
        openai_client = AsyncOpenAI(api_key=credentials.openai_api_key, base_url=credentials.openai_base_url)
        generator = OpenAICodeGenerator(openai_client, model=config.codegen_model)

    renderer = PlaywrightRenderer(
        headless=config.headless,
        user_agent=config.user_agent,
        navigation_timeout=config.navigation_timeout,
        wait_until=config.wait_until,
    )
    try:
        engine = Engine(config, index_client=es, renderer=renderer, code_generator=generator)
        return await engine.run()
    finally:
        await es.close()
        if openai_client is not None:
            await openai_client.close()
