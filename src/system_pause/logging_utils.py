"""Logging for the pause control plane.

Every record leaving the ``system_pause`` logger carries an ``event`` name, a
``data`` mapping and the ``component`` (module below the package) that
emitted it. Console output goes through rich; the optional audit file holds
one JSON object per line.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging import Logger
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "system_pause"
DEFAULT_EVENT = "log"


class AuditContextFilter(logging.Filter):
    """Stamps ``event``, ``data`` and ``component`` on records that lack them."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "event", None):
            record.event = DEFAULT_EVENT
        data = getattr(record, "data", None)
        if data is None:
            record.data = {}
        elif not isinstance(data, dict):
            record.data = {"value": data}
        prefix = PACKAGE_LOGGER + "."
        record.component = record.name[len(prefix):] if record.name.startswith(prefix) else record.name
        return True


class StructuredJsonFormatter(logging.Formatter):
    """One audit line per record: timestamp, level, component, event, message, data."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        AuditContextFilter().filter(record)
        line: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "component": record.component,
            "event": record.event,
            "message": record.getMessage(),
            "data": record.data,
        }
        if record.exc_info:
            line["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(line, default=str)


def configure_logging(log_file: Optional[str] = None, *, level: int | str = logging.INFO) -> Logger:
    """Install console and audit handlers on the package logger.

    Args:
        log_file: Optional path of the JSON lines audit trail.
        level: Level (number or name) applied to the package logger.

    Returns:
        The ``system_pause`` logger.
    """

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    context = AuditContextFilter()
    handler = RichHandler(console=Console(stderr=True), show_time=False, show_path=False)
    handler.addFilter(context)
    handler.setFormatter(logging.Formatter("[%(component)s] %(event)s: %(message)s"))

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()
    logger.addHandler(handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.addFilter(context)
        file_handler.setFormatter(StructuredJsonFormatter())
        logger.addHandler(file_handler)

    logger.debug("Logging configured", extra={"event": "logging_configured", "data": {"audit_file": log_file}})
    return logger


__all__ = ["AuditContextFilter", "StructuredJsonFormatter", "configure_logging"]
