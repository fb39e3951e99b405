# File: site_indexer/aggregator.py
"""site_indexer.aggregator: Сводный отчёт об обходе сайта."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from site_indexer.utils import utc_timestamp

__all__ = ("PageOutcome", "CrawlFailure", "CrawlReport")


@dataclass(slots=True)
class PageOutcome:
    """Обработанная страница и результат записи в индекс."""

    url: str
    title: str
    content_length: int
    indexed: bool
    links_found: int = 0


@dataclass(slots=True)
class CrawlFailure:
    """Ошибка на одном из этапов обработки страницы (render, timeout, internal)."""

    url: str
    stage: str
    error: str


@dataclass(slots=True)
class CrawlReport:
    """Результаты обхода: страницы, ошибки и итоговые счётчики."""

    base_url: str = ""
    index_name: str = ""
    strategy: str = ""
    started_at: str = field(default_factory=utc_timestamp)
    finished_at: Optional[str] = None
    pages: List[PageOutcome] = field(default_factory=list)
    failures: List[CrawlFailure] = field(default_factory=list)

    def record_page(self, outcome: PageOutcome) -> None:
        self.pages.append(outcome)

    def record_failure(self, url: str, stage: str, error: Any) -> None:
        message = str(error) if not isinstance(error, BaseException) else (str(error) or type(error).__name__)
        self.failures.append(CrawlFailure(url=url, stage=stage, error=message))

    def finish(self) -> None:
        self.finished_at = utc_timestamp()

    @property
    def indexed_count(self) -> int:
        return sum(1 for p in self.pages if p.indexed)

    @property
    def index_failures(self) -> int:
        return sum(1 for p in self.pages if not p.indexed)

    def summary(self) -> Dict[str, Any]:
        """Итоговые счётчики для лога и CLI."""
        return {
            "pages_processed": len(self.pages),
            "pages_indexed": self.indexed_count,
            "index_failures": self.index_failures,
            "dropped": len(self.failures),
        }

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["summary"] = self.summary()
        return data

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление отчёта."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)
