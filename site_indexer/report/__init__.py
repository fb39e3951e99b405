# File: site_indexer/report/__init__.py
"""site_indexer.report: Сохранение отчёта об обходе в JSON и HTML."""

from __future__ import annotations

from site_indexer.report.html_report import render_html
from site_indexer.report.json_report import render_json

__all__ = ["render_json", "render_html"]
