# File: site_indexer/utils.py
"""site_indexer.utils: Утилиты для разрешения и нормализации URL и отметок времени."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Sequence
from urllib.parse import parse_qsl, urldefrag, urlencode, urljoin, urlparse, urlunparse

from site_indexer.logger import logger

__all__: Sequence[str] = (
    "resolve_url",
    "normalize_url",
    "same_host",
    "utc_timestamp",
)

_DEFAULT_PORTS = {"http": 80, "https": 443}
_SKIPPED_PREFIXES = ("mailto:", "javascript:", "tel:", "data:")


def resolve_url(href: str, base_url: Optional[str] = None) -> Optional[str]:
    """Разрешает *href* относительно *base_url* по RFC 3986 и убирает фрагмент.

    Возвращает ``None`` для пустых, нестандартных (mailto:, javascript:, ...)
    и некорректных ссылок.
    """
    raw = href.strip()
    if not raw or raw.lower().startswith(_SKIPPED_PREFIXES):
        return None
    try:
        absolute = urljoin(base_url, raw) if base_url else raw
        absolute, _ = urldefrag(absolute)
        parsed = urlparse(absolute)
        _ = parsed.port  # raises ValueError on a malformed netloc
    except ValueError:
        logger.debug("Unresolvable href skipped: %r (base %s)", href, base_url)
        return None
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return None
    return absolute


def normalize_url(url: str) -> str:
    """Нормализует абсолютный URL для дедупликации.

    Схема и хост в нижнем регистре, порт по умолчанию убирается, пустой путь
    становится ``/``, параметры запроса сортируются, фрагмент отбрасывается.
    """
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    host = (parsed.hostname or "").lower()
    if ":" in host:
        host = f"[{host}]"
    port = parsed.port
    netloc = host if port is None or _DEFAULT_PORTS.get(scheme) == port else f"{host}:{port}"
    if parsed.username:
        userinfo = parsed.username + (f":{parsed.password}" if parsed.password else "")
        netloc = f"{userinfo}@{netloc}"
    path = parsed.path or "/"
    qs = parse_qsl(parsed.query, keep_blank_values=True)
    qs.sort()
    query = urlencode(qs, doseq=True)
    return urlunparse((scheme, netloc, path, parsed.params, query, ""))


def same_host(url: str, other: str) -> bool:
    """True, если у двух URL совпадает имя хоста (без учёта регистра и порта)."""
    return (urlparse(url).hostname or "").lower() == (urlparse(other).hostname or "").lower()


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """ISO-8601 в UTC с миллисекундами и суффиксом ``Z``: ``2024-05-01T10:00:00.000Z``."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
