# File: site_indexer/extraction/generated.py
"""
Extraction strategy synthesized once at startup from a sample page.

Build protocol (:func:`build_generated_strategy`):

1. fetch the raw markup of the seed page;
2. ask the code generator for ``async def extract_text(page) -> str``;
3. strip markdown fences and a leading language token from the answer;
4. compile it in the sandbox and check that ``extract_text`` is callable.

Any failure raises :class:`~site_indexer.errors.StrategyBuildError` (or
:class:`~site_indexer.errors.SampleFetchError` for step 1) and the crawl is
aborted before the first page is rendered.
"""
from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Final, FrozenSet, Optional

from site_indexer.crawler.fetcher import fetch_markup
from site_indexer.crawler.renderer import RenderedPage
from site_indexer.errors import StrategyBuildError
from site_indexer.extraction.base import ExtractionStrategy
from site_indexer.extraction.codegen import ENTRYPOINT, CodeGenerator
from site_indexer.extraction.sandbox import PageCapability, compile_extractor
from site_indexer.logger import get_logger

__all__ = ("GeneratedStrategy", "build_generated_strategy", "sanitize_source")

logger = get_logger("extraction.generated")

_LANGUAGE_TOKENS: Final[FrozenSet[str]] = frozenset({"python", "python3", "py", "javascript", "js"})

MarkupFetcher = Callable[..., Awaitable[str]]


def sanitize_source(raw: str) -> str:
    """Remove a surrounding markdown code fence and a leading language-name line."""
    text = raw.strip()
    lines = text.splitlines()
    if lines and lines[0].lstrip().startswith("```"):
        # the info string ("```python") goes with the opening fence
        body = lines[1:]
        for idx in range(len(body) - 1, -1, -1):
            if body[idx].strip().startswith("```"):
                body = body[:idx]
                break
        lines = body
    # a bare language token can survive without the fence: "python\nasync def ..."
    while lines and lines[0].strip().lower() in _LANGUAGE_TOKENS:
        lines = lines[1:]
    return "\n".join(line for line in lines if not line.strip().startswith("```")).strip()


class GeneratedStrategy(ExtractionStrategy):
    """Wraps the compiled ``extract_text``; shared read-only by all workers."""

    name = "generated"

    def __init__(self, func: Callable[..., Any], source: str = "") -> None:
        if not callable(func):
            raise StrategyBuildError(f"{func!r} is not callable")
        self._func = func
        self.source = source

    async def _extract(self, page: RenderedPage) -> str:
        result = self._func(PageCapability(page))
        if inspect.isawaitable(result):
            result = await result
        return result

    @classmethod
    def from_source(cls, raw_source: str) -> GeneratedStrategy:
        source = sanitize_source(raw_source)
        if not source:
            raise StrategyBuildError("Generated source is empty")
        return cls(compile_extractor(source, ENTRYPOINT), source)


async def build_generated_strategy(
    url: str,
    generator: CodeGenerator,
    *,
    fetch: MarkupFetcher = fetch_markup,
    timeout: float = 15.0,
    user_agent: Optional[str] = None,
    max_chars: Optional[int] = None,
) -> GeneratedStrategy:
    """Run the build protocol against *url*; see the module docstring."""
    markup = await fetch(url, timeout=timeout, user_agent=user_agent, max_chars=max_chars)
    try:
        raw = await generator.generate(markup)
    except StrategyBuildError:
        raise
    except Exception as exc:
        raise StrategyBuildError(f"Code generation failed: {exc}") from exc
    if not isinstance(raw, str) or not raw.strip():
        raise StrategyBuildError("Code generation returned an empty answer")
    strategy = GeneratedStrategy.from_source(raw)
    logger.info("Generated extractor compiled (%d lines)", strategy.source.count("\n") + 1)
    logger.debug("Generated extractor source:\n%s", strategy.source)
    return strategy
