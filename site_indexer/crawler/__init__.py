# File: site_indexer/crawler/__init__.py
"""site_indexer.crawler: Фронтир, планировщик, рендеринг и поиск ссылок."""

from .frontier import Frontier
from .links import LinkDiscoverer, extract_links
from .renderer import PlaywrightRenderer, RenderedPage, Renderer
from .scheduler import Scheduler

__all__ = [
    "Frontier",
    "LinkDiscoverer",
    "extract_links",
    "PlaywrightRenderer",
    "RenderedPage",
    "Renderer",
    "Scheduler",
]
