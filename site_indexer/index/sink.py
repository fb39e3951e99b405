# File: site_indexer/index/sink.py
"""site_indexer.index.sink: Запись документов в поисковый индекс с изоляцией ошибок.

Неудачная запись логируется и учитывается, но никогда не прерывает обход и не
повторяется автоматически.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol

from elasticsearch import AsyncElasticsearch

from site_indexer.logger import get_logger
from site_indexer.models import Document

__all__ = ("IndexClient", "IndexSink", "create_elasticsearch_client")

logger = get_logger("index")


class IndexClient(Protocol):
    """Subset of :class:`elasticsearch.AsyncElasticsearch` used by the sink."""

    async def index(self, *, index: str, document: Mapping[str, Any]) -> Any: ...


def create_elasticsearch_client(endpoint: str, api_key: Optional[str] = None, **kwargs: Any) -> AsyncElasticsearch:
    """Создаёт асинхронный клиент Elasticsearch по endpoint и API-ключу."""
    return AsyncElasticsearch(endpoint, api_key=api_key, **kwargs)


class IndexSink:
    """Адаптер документа к API записи индекса."""

    def __init__(self, client: IndexClient) -> None:
        self.client = client
        self.written = 0
        self.failed = 0

    async def write(self, document: Document, index_name: str) -> bool:
        """Отправляет документ в индекс *index_name*; True при успехе."""
        try:
            await self.client.index(index=index_name, document=document.to_body())
        except Exception as exc:  # pylint: disable=broad-except
            self.failed += 1
            logger.warning("Error indexing data for %s: %s", document.url, exc)
            return False
        self.written += 1
        logger.info("Successfully indexed page: %s", document.url)
        return True
