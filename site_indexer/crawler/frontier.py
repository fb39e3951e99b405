# File: site_indexer/crawler/frontier.py
"""
Deduplicating FIFO frontier of pending crawl requests.

Queue, visited set and in-flight counter share one :class:`asyncio.Condition`,
so enqueue, dequeue and the termination check are atomic with respect to
each other.
"""
from __future__ import annotations

import asyncio
from collections import deque
from typing import Deque, Iterable, List, Optional, Set

from site_indexer.logger import get_logger
from site_indexer.models import CrawlRequest
from site_indexer.utils import normalize_url, resolve_url

__all__ = ("Frontier",)

logger = get_logger("frontier")


class Frontier:
    """Breadth-first work queue with a monotonically growing visited set."""

    def __init__(self, *, max_requests: Optional[int] = None, max_depth: Optional[int] = None) -> None:
        if max_requests is not None and max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if max_depth is not None and max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        self.max_requests = max_requests
        self.max_depth = max_depth
        self._queue: Deque[CrawlRequest] = deque()
        self._visited: Set[str] = set()
        self._in_flight = 0
        self._cond = asyncio.Condition()

    # ------------------------------------------------------------------ #
    # Producers
    # ------------------------------------------------------------------ #
    async def enqueue(
        self, url: str, origin_url: Optional[str] = None, *, depth: int = 0
    ) -> Optional[CrawlRequest]:
        """
        Resolve *url* against *origin_url* and append it to the queue, deduplicated
        on its normalized form. The request keeps the resolved URL for loading.

        Returns the new request, or ``None`` when the URL is malformed, already
        visited, or falls outside the configured limits.
        """
        absolute = resolve_url(url, origin_url)
        if absolute is None:
            return None
        normalized = normalize_url(absolute)
        async with self._cond:
            if normalized in self._visited:
                return None
            if self.max_depth is not None and depth > self.max_depth:
                logger.debug("Depth %d over limit, skipped: %s", depth, normalized)
                return None
            if self.max_requests is not None and len(self._visited) >= self.max_requests:
                logger.debug("Request limit %d reached, skipped: %s", self.max_requests, normalized)
                return None
            self._visited.add(normalized)
            request = CrawlRequest(url=absolute, origin_url=origin_url, depth=depth, key=normalized)
            self._queue.append(request)
            self._cond.notify()
        logger.debug("Enqueued %s (depth %d)", absolute, depth)
        return request

    async def enqueue_many(
        self, urls: Iterable[str], origin_url: Optional[str] = None, *, depth: int = 0
    ) -> List[CrawlRequest]:
        added: List[CrawlRequest] = []
        for url in urls:
            request = await self.enqueue(url, origin_url, depth=depth)
            if request is not None:
                added.append(request)
        return added

    # ------------------------------------------------------------------ #
    # Consumers
    # ------------------------------------------------------------------ #
    async def dequeue(self) -> Optional[CrawlRequest]:
        """Pop the next request without waiting; it counts as in flight until :meth:`task_done`."""
        async with self._cond:
            return self._pop_locked()

    async def get(self) -> Optional[CrawlRequest]:
        """
        Wait for the next request.

        Returns ``None`` once the queue is empty and no request is in flight,
        i.e. when the crawl is finished.
        """
        async with self._cond:
            while not self._queue and self._in_flight > 0:
                await self._cond.wait()
            request = self._pop_locked()
            if request is None:
                # wake the other idle workers so they can exit too
                self._cond.notify_all()
            return request

    async def task_done(self) -> None:
        async with self._cond:
            if self._in_flight <= 0:
                raise ValueError("task_done() called more times than requests were dequeued")
            self._in_flight -= 1
            self._cond.notify_all()

    def _pop_locked(self) -> Optional[CrawlRequest]:
        if not self._queue:
            return None
        self._in_flight += 1
        return self._queue.popleft()

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #
    def is_empty(self) -> bool:
        return not self._queue

    def is_drained(self) -> bool:
        """Termination condition: nothing queued and nothing in flight."""
        return not self._queue and self._in_flight == 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def visited_count(self) -> int:
        return len(self._visited)

    def __len__(self) -> int:
        return len(self._queue)

    def __contains__(self, url: object) -> bool:
        if not isinstance(url, str):
            return False
        absolute = resolve_url(url)
        return absolute is not None and normalize_url(absolute) in self._visited
