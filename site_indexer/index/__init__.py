# File: site_indexer/index/__init__.py
"""site_indexer.index: Запись документов во внешний поисковый индекс."""

from .sink import IndexClient, IndexSink, create_elasticsearch_client

__all__ = ["IndexClient", "IndexSink", "create_elasticsearch_client"]
