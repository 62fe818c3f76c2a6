"""
Logging setup for the catalog parser.

``configure_logging(config)`` is called once by the CLI before any pipeline
work. Library modules only ever call ``logging.getLogger(__name__)``, or
``category_logger()`` inside a category run.

Categories may run on worker threads, so their log lines interleave. Every
line a category run emits carries a ``category`` attribute (via
``category_logger``); the plain format shows the worker thread, and the JSON
format emits ``category`` as its own key::

    {"ts": "2026-02-24T15:00:00Z", "level": "WARNING", "logger": "tbc_catalog.pipeline.base",
     "msg": "Stage [gems] skipped entry #12: missing Color", "category": "gems"}
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tbc_catalog.config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(threadName)s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Attributes every LogRecord carries; anything else came from ``extra=``.
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


def _record_payload(record: logging.LogRecord, exc_text: str | None) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(LOG_DATE_FORMAT),
        "level": record.levelname,
        "logger": record.name,
        "msg": record.getMessage(),
    }
    payload.update(
        (key, val) for key, val in record.__dict__.items()
        if key not in _STANDARD_ATTRS and not key.startswith("_")
    )
    if exc_text:
        payload["exc"] = exc_text
    return payload


class _JsonFormatter(logging.Formatter):
    """One JSON object per line; ``extra=`` fields become top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        exc_text = self.formatException(record.exc_info) if record.exc_info else None
        return json.dumps(_record_payload(record, exc_text), default=str)


def category_logger(logger: logging.Logger, category: str) -> logging.LoggerAdapter:
    """Wrap ``logger`` so every record it emits carries ``category``."""
    return logging.LoggerAdapter(logger, {"category": category})


def configure_logging(config: "LoggingConfig", debug: bool = False) -> None:
    """Configure the root logger from a ``LoggingConfig`` instance.

    Console output goes to stderr so the run report on stdout can be
    redirected on its own. A file handler is added when ``config.log_file``
    is set; its parent directory is created if needed.

    Args:
        config: Logging section of ``AppConfig``.
        debug:  Force DEBUG level regardless of ``config.level``
                (``AppConfig.debug`` / ``TBC_CATALOG_DEBUG``).
    """
    level = logging.DEBUG if debug else getattr(logging, config.level, logging.INFO)
    formatter = (
        _JsonFormatter() if config.json_format
        else logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
