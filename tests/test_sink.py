# File: tests/test_sink.py
import pytest
from conftest import BASE, FakeIndexClient
from elasticsearch import AsyncElasticsearch

from site_indexer.index.sink import IndexSink, create_elasticsearch_client
from site_indexer.models import Document


@pytest.mark.asyncio()
async def test_write_sends_document_body(index_client):
    sink = IndexSink(index_client)
    document = Document.build(title="Home", content="Hello", url=f"{BASE}/")

    assert await sink.write(document, "site_index") is True

    index, body = index_client.calls[0]
    assert index == "site_index"
    assert body == {"title": "Home", "content": "Hello", "url": f"{BASE}/", "crawledAt": document.crawled_at}
    assert (sink.written, sink.failed) == (1, 0)


@pytest.mark.asyncio()
async def test_failed_write_is_counted_not_raised():
    client = FakeIndexClient(fail_urls={f"{BASE}/bad"})
    sink = IndexSink(client)

    assert await sink.write(Document.build(title="", content="", url=f"{BASE}/bad"), "site_index") is False
    assert await sink.write(Document.build(title="", content="", url=f"{BASE}/good"), "site_index") is True

    assert (sink.written, sink.failed) == (1, 1)
    # no per-URL state kept in the sink; the crawl report carries failed URLs
    assert not hasattr(sink, "errors")
    # no automatic retry
    assert [body["url"] for _, body in client.calls] == [f"{BASE}/bad", f"{BASE}/good"]


@pytest.mark.asyncio()
async def test_create_elasticsearch_client():
    client = create_elasticsearch_client("http://localhost:9200", api_key="secret")
    try:
        assert isinstance(client, AsyncElasticsearch)
    finally:
        await client.close()
