# === FILE: site_indexer/logger.py ===
"""Logging setup for **SiteIndexer**.

* One named logger, ``SiteIndexer``; modules log through children of it::

      from site_indexer.logger import get_logger
      logger = get_logger("frontier")      # -> SiteIndexer.frontier

* Console records go to stderr so the CLI can print its summary on stdout.
* An optional log file rotates at 5 MB.
* The HTTP clients used for indexing and code generation log every request
  at INFO; they are capped at WARNING unless the project runs at DEBUG.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Tuple, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_LOGGER_NAME: Final[str] = "SiteIndexer"

#: third-party loggers that are too chatty at INFO during a crawl
NOISY_LOGGERS: Final[Tuple[str, ...]] = ("elastic_transport", "elasticsearch", "httpx", "openai")

_LevelT = Union[int, str]


def _build_handlers(fmt: str, log_file: str | Path | None) -> list[logging.Handler]:
    formatter = logging.Formatter(fmt)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(
                filename=str(log_file),
                maxBytes=5 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def _quiet_clients(level: int) -> None:
    client_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(client_level)


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """(Re)configure the project logger.

    Parameters
    ----------
    level
        Numeric or textual level, e.g. ``"DEBUG"``.
    log_file
        Optional path of a rotating log file, in addition to stderr.
    log_format
        Format string for :class:`logging.Formatter`.
    replace_handlers
        Drop previously installed handlers first.
    """
    lg = logging.getLogger(_LOGGER_NAME)
    lg.setLevel(level)
    if replace_handlers:
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
            handler.close()
    for handler in _build_handlers(log_format, log_file):
        lg.addHandler(handler)
    lg.propagate = False
    _quiet_clients(lg.level)
    return lg


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Shortcut used by the CLI."""
    return configure(level=level, log_file=log_file, log_format=log_format, replace_handlers=True)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")


logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging", "get_logger", "DEFAULT_FORMAT", "NOISY_LOGGERS"]
