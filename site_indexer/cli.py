# === FILE: site_indexer/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска SiteIndexer через командную строку.

Команды:
  crawl URL INDEX   Обойти сайт и записать документы в индекс INDEX
  config URL INDEX  Показать итоговую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования

Команда crawl опции:
  --strategy NAME     static | generated
  --concurrency INT   Число одновременно обрабатываемых страниц
  --max-pages INT     Лимит страниц
  --max-depth INT     Лимит глубины ссылок
  --crawl-timeout SEC Таймаут всего обхода (секунд)
  --json PATH         Сохранить JSON-отчёт в файл
  --html PATH         Сохранить HTML-отчёт в файл
  --template DIR      Папка с Jinja2-шаблонами
  --pretty            Преформатировать JSON-вывод (отступ 2)

Учётные данные читаются из окружения (и файла .env):
  ES_ENDPOINT, ES_API_KEY, OPENAI_API_KEY, OPENAI_BASE_URL

Пример:
  site-indexer crawl https://www.ntu.edu.tw/ ntu_website --json reports/crawl.json
"""
import asyncio
import json
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from pydantic import ValidationError

from site_indexer import __version__
from site_indexer.config import Credentials, load_config
from site_indexer.engine import start_crawl
from site_indexer.errors import ConfigurationError, StartupError
from site_indexer.logger import DEFAULT_FORMAT, init_logging
from site_indexer.report.html_report import render_html
from site_indexer.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _load(ctx, url, index_name, **overrides):
    try:
        return load_config(ctx.obj['config_path'], base_url=url, index_name=index_name, **overrides)
    except (ValidationError, FileNotFoundError, ValueError, TypeError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteIndexer, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд SiteIndexer CLI."""
    load_dotenv()
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.argument('index_name', metavar='INDEX')
@click.option(
    '--strategy', '-s', 'strategy',
    default=None,
    type=click.Choice(['static', 'generated']),
    help='Стратегия извлечения текста (override strategy)'
)
@click.option('--concurrency', type=click.IntRange(min=1), default=None, help='Параллельность (override concurrency)')
@click.option('--max-pages', '-l', 'max_pages', type=click.IntRange(min=1), default=None, help='Лимит страниц')
@click.option('--max-depth', 'max_depth', type=click.IntRange(min=0), default=None, help='Лимит глубины')
@click.option(
    '--crawl-timeout', 'crawl_timeout',
    type=float,
    default=None,
    help='Таймаут всего обхода (секунд)'
)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Папка с Jinja2-шаблонами (по умолчанию встроенный шаблон)'
)
@click.option(
    '--pretty', is_flag=True,
    help='Преформатировать JSON-вывод (отступ 2)'
)
@click.pass_context
def crawl(ctx, url, index_name, strategy, concurrency, max_pages, max_depth, crawl_timeout,
          json_output, html_output, template_dir, pretty):
    """Обойти сайт URL и записать страницы в индекс INDEX."""
    cfg = _load(
        ctx, url, index_name,
        strategy=strategy, concurrency=concurrency, max_pages=max_pages, max_depth=max_depth,
    )
    credentials = Credentials.from_env()
    click.echo(f'Starting crawl: {cfg.base_url} -> {cfg.index_name} ({cfg.strategy} strategy)')
    try:
        if crawl_timeout:
            report = asyncio.run(
                asyncio.wait_for(start_crawl(cfg, credentials), timeout=crawl_timeout)
            )
        else:
            report = asyncio.run(start_crawl(cfg, credentials))
    except asyncio.TimeoutError:
        print_error(f'Обход не завершён за {crawl_timeout} секунд')
    except ConfigurationError as e:
        print_error(f'Ошибка конфигурации: {e}')
    except StartupError as e:
        print_error(f'Ошибка запуска, обход не начат: {e}')
    except Exception as e:
        print_error(f'Ошибка при обходе: {e}')

    summary = report.summary()
    click.echo(
        'Crawling complete. '
        f'processed={summary["pages_processed"]} indexed={summary["pages_indexed"]} '
        f'index_failures={summary["index_failures"]} dropped={summary["dropped"]}'
    )

    if not json_output and not html_output:
        click.echo(json.dumps(summary, ensure_ascii=False, indent=2 if pretty else None))
        return

    if json_output:
        try:
            saved_json = render_json(report, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved_json}')
        except Exception as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    if html_output:
        try:
            saved_html = render_html(report, template_dir, html_output)
            click.echo(f'HTML report: {saved_html}')
        except Exception as e:
            print_error(f'Ошибка при сохранении HTML: {e}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.argument('index_name', metavar='INDEX')
@click.pass_context
def show_config(ctx, url, index_name):
    """Показать итоговую конфигурацию в JSON."""
    cfg = _load(ctx, url, index_name)
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
