# src/logging/logger.py — v3
"""Configuration of the ``readlearn`` logger hierarchy.

Modules log through ``logging.getLogger(__name__)``; ``setup_logging`` is
called once by the HTTP app or the CLI. A filter stamps the request context
(request id, action, resolution tier) onto every record so both formatters
can render it.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from readlearn.logging.context import get_context

ROOT_LOGGER = "readlearn"

# Chatty dependencies kept at WARNING unless running at DEBUG.
NOISY_LOGGERS = ("httpx", "httpcore", "anthropic", "sentence_transformers", "chromadb")


class RequestContextFilter(logging.Filter):
    """Copies the current request context onto the record."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = get_context()
        record.request_id = ctx.request_id
        record.action = ctx.action
        record.tier = ctx.tier
        return True


def _context_of(record: logging.LogRecord) -> dict[str, Any]:
    fields = {
        "request_id": getattr(record, "request_id", None),
        "action": getattr(record, "action", None),
        "tier": getattr(record, "tier", None),
    }
    if not any(fields.values()):
        # Record did not pass through the filter (e.g. formatted directly).
        fields = get_context().as_dict()
    return {k: v for k, v in fields.items() if v is not None}


def _timestamp(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": _timestamp(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = _context_of(record)
        if context:
            entry["context"] = context
        data = getattr(record, "data", None)
        if data:
            entry["data"] = data
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Single-line human-readable output for development."""

    def format(self, record: logging.LogRecord) -> str:
        context = _context_of(record)
        line = f"{_timestamp(record):%Y-%m-%d %H:%M:%S} [{record.levelname:8s}] {record.name}"
        if "request_id" in context:
            line += f" [{context['request_id']}]"
        if "tier" in context:
            line += f" ({context['tier']})"
        line += f" - {record.getMessage()}"
        if record.exc_info and record.exc_info[1] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: str | Path | None = None,
    rotation: str = "10MB",
    retention: int = 30,
) -> logging.Logger:
    """Attach console (and optionally rotating file) handlers to ``readlearn``.

    Safe to call repeatedly: previous handlers are replaced.

    Args:
        level: DEBUG, INFO, WARNING or ERROR.
        log_format: "json" or "text".
        log_file: Optional log file path.
        rotation: File size that triggers rotation, e.g. "10MB".
        retention: Rotated files kept.

    Returns:
        The configured ``readlearn`` logger.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter: logging.Formatter = JsonFormatter() if log_format == "json" else TextFormatter()
    context_filter = RequestContextFilter()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        from readlearn.logging.handlers import create_rotating_handler

        handlers.append(
            create_rotating_handler(str(log_file), rotation=rotation, retention=retention)
        )

    root = logging.getLogger(ROOT_LOGGER)
    for old in root.handlers:
        old.close()
    root.handlers.clear()
    root.setLevel(numeric_level)
    # Handlers live here; a root-level basicConfig must not print records again.
    root.propagate = False
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root.addHandler(handler)

    third_party_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

    return root
