# File: tests/test_report.py
import json

from site_indexer.aggregator import CrawlReport, PageOutcome
from site_indexer.report import render_html, render_json


def make_report() -> CrawlReport:
    report = CrawlReport(base_url="https://example.org/", index_name="site_index", strategy="static")
    report.record_page(PageOutcome(url="https://example.org/", title="<Home>", content_length=42, indexed=True))
    report.record_page(PageOutcome(url="https://example.org/a", title="A", content_length=0, indexed=False))
    report.record_failure("https://example.org/gone", "render", RuntimeError())
    report.finish()
    return report


def test_summary_counts():
    assert make_report().summary() == {
        "pages_processed": 2,
        "pages_indexed": 1,
        "index_failures": 1,
        "dropped": 1,
    }


def test_failure_without_message_uses_exception_name():
    assert make_report().failures[0].error == "RuntimeError"


def test_render_json(tmp_path):
    path = render_json(make_report(), tmp_path / "nested" / "report.json")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["base_url"] == "https://example.org/"
    assert data["pages"][0]["title"] == "<Home>"
    assert data["summary"]["dropped"] == 1
    assert data["finished_at"].endswith("Z")


def test_render_html_builtin_template(tmp_path):
    path = render_html(make_report(), None, tmp_path / "report.html")
    html = path.read_text(encoding="utf-8")
    assert "site_index" in html
    assert "&lt;Home&gt;" in html
    assert "https://example.org/gone" in html


def test_render_html_custom_template(tmp_path):
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "report.html.j2").write_text(
        "{{ summary.pages_indexed }}/{{ summary.pages_processed }}", encoding="utf-8"
    )
    path = render_html(make_report(), templates, tmp_path / "out.html")
    assert path.read_text(encoding="utf-8") == "1/2"
