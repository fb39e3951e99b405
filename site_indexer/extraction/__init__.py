# File: site_indexer/extraction/__init__.py
"""site_indexer.extraction: Стратегии извлечения текста страницы."""

from .base import NON_CONTENT_TAGS, ExtractionStrategy, collapse_whitespace
from .generated import GeneratedStrategy, build_generated_strategy, sanitize_source
from .static import StaticRuleStrategy

__all__ = [
    "NON_CONTENT_TAGS",
    "ExtractionStrategy",
    "collapse_whitespace",
    "GeneratedStrategy",
    "build_generated_strategy",
    "sanitize_source",
    "StaticRuleStrategy",
]
