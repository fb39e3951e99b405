# File: site_indexer/crawler/fetcher.py
"""
Fetcher module: raw markup download of a single page over plain HTTP.

Used once at startup to obtain the sample page the extractor is generated from,
so it deliberately bypasses the browser.
"""
from __future__ import annotations

import asyncio
from typing import Optional

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_indexer.errors import SampleFetchError
from site_indexer.logger import get_logger

__all__ = ("fetch_markup",)

logger = get_logger("fetcher")


async def fetch_markup(
    url: str,
    *,
    timeout: float = 15.0,
    user_agent: Optional[str] = None,
    max_chars: Optional[int] = None,
    session: Optional[ClientSession] = None,
) -> str:
    """
    Download *url* and return its markup, truncated to *max_chars*.

    Raises SampleFetchError on network errors, timeouts, HTTP status >= 400
    or an empty body.
    """
    headers = {"User-Agent": user_agent} if user_agent else None
    own_session = session is None
    if session is None:
        session = ClientSession(timeout=ClientTimeout(total=timeout), headers=headers)
    try:
        async with session.get(url, raise_for_status=False) as resp:
            if resp.status >= 400:
                raise SampleFetchError(url, f"HTTP {resp.status}")
            text = await resp.text(errors="replace")
    except asyncio.TimeoutError as exc:
        raise SampleFetchError(url, f"timed out after {timeout} s") from exc
    except ClientError as exc:
        raise SampleFetchError(url, str(exc) or type(exc).__name__) from exc
    finally:
        if own_session:
            await session.close()

    if not text.strip():
        raise SampleFetchError(url, "empty response body")
    if max_chars is not None and len(text) > max_chars:
        logger.debug("Sample markup truncated from %d to %d chars", len(text), max_chars)
        text = text[:max_chars]
    logger.info("Fetched sample page %s (%d chars)", url, len(text))
    return text
