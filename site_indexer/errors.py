# File: site_indexer/errors.py
"""site_indexer.errors: Иерархия исключений SiteIndexer.

Ошибки запуска (``StartupError`` и наследники) прерывают работу до начала
обхода. Ошибки отдельной страницы (``RenderError``) перехватываются
планировщиком и не выходят за пределы одного запроса.
"""

from __future__ import annotations

__all__ = [
    "SiteIndexerError",
    "ConfigurationError",
    "StartupError",
    "SampleFetchError",
    "StrategyBuildError",
    "RenderError",
]


class SiteIndexerError(Exception):
    """Базовый класс для всех ошибок проекта."""


class ConfigurationError(SiteIndexerError):
    """Некорректные настройки или отсутствующие учётные данные."""


class StartupError(SiteIndexerError):
    """Фатальная ошибка на этапе подготовки обхода."""


class SampleFetchError(StartupError):
    """Не удалось загрузить образец страницы для генерации экстрактора."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Cannot fetch sample page {url}: {reason}")
        self.url = url
        self.reason = reason


class StrategyBuildError(StartupError):
    """Сгенерированный код не удалось получить, проверить или скомпилировать."""


class RenderError(SiteIndexerError):
    """Навигация по странице завершилась ошибкой или HTTP-статусом >= 400."""

    def __init__(self, url: str, reason: str, status: int | None = None) -> None:
        super().__init__(f"Render failed for {url}: {reason}")
        self.url = url
        self.reason = reason
        self.status = status
