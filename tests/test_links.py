# File: tests/test_links.py
from __future__ import annotations

import asyncio

import pytest

from site_indexer.crawler.frontier import Frontier
from site_indexer.crawler.links import LinkDiscoverer, extract_links
from site_indexer.models import CrawlRequest


def test_relative_link_resolved_against_loaded_url():
    html = '<a href="/about">About</a><a href="contact">Contact</a>'
    assert extract_links(html, "https://example.org/dept/page") == [
        "https://example.org/about",
        "https://example.org/dept/contact",
    ]


def test_unusable_hrefs_are_skipped():
    html = (
        '<a href="mailto:x@example.org">m</a>'
        '<a href="javascript:void(0)">j</a>'
        '<a href="">empty</a>'
        '<a href="http://[broken">bad</a>'
        '<a name="anchor-only">no href</a>'
        '<a href="/ok">ok</a>'
    )
    assert extract_links(html, "https://example.org/") == ["https://example.org/ok"]


@pytest.mark.asyncio()
async def test_discover_enqueues_same_host_links_one_level_deeper():
    frontier = Frontier()
    parent = await frontier.enqueue("https://example.org/")
    discoverer = LinkDiscoverer(frontier)
    html = '<a href="/a">a</a><a href="https://elsewhere.org/">x</a><a href="/a#dup">dup</a>'

    added = await discoverer.discover(html, "https://example.org/", parent)

    assert added == 1
    await frontier.dequeue()  # the seed
    request = await frontier.dequeue()
    assert request == CrawlRequest(url="https://example.org/a", origin_url="https://example.org/", depth=1)


@pytest.mark.asyncio()
async def test_discover_can_follow_external_hosts():
    frontier = Frontier()
    discoverer = LinkDiscoverer(frontier, same_host_only=False)
    added = await discoverer.discover('<a href="https://elsewhere.org/">x</a>', "https://example.org/")
    assert added == 1
    assert "https://elsewhere.org/" in frontier


@pytest.mark.asyncio()
async def test_pages_linking_to_same_url_concurrently_enqueue_it_once():
    frontier = Frontier()
    discoverer = LinkDiscoverer(frontier)
    html = '<a href="/shared">s</a><a href="/shared?">s</a>'
    counts = await asyncio.gather(
        *(discoverer.discover(html, f"https://example.org/p{i}") for i in range(10))
    )
    assert sum(counts) == 1
    assert len(frontier) == 1


@pytest.mark.asyncio()
async def test_discover_never_raises(monkeypatch):
    import site_indexer.crawler.links as links_module

    def boom(html, base_url):
        raise RuntimeError("parser exploded")

    monkeypatch.setattr(links_module, "extract_links", boom)
    discoverer = LinkDiscoverer(Frontier())
    assert await discoverer.discover("<a href='/x'>x</a>", "https://example.org/") == 0
