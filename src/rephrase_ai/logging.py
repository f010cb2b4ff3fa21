"""Structured logging configuration.

Uses standard library logging with a JSON formatter. Fields that carry model
or user text (see `CONTENT_FIELDS`) are reduced to their length unless the
service logs at DEBUG.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

CONTENT_FIELDS: frozenset[str] = frozenset({"raw_text"})

_RESERVED_LOG_RECORD_ATTRS: set[str] = set(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


class JsonFormatter(logging.Formatter):
    """Render each record as a single-line JSON object."""

    def __init__(self, *, include_content: bool = False) -> None:
        super().__init__()
        self.include_content = include_content

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (record)
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra = {
            key: self._field_value(key, value)
            for key, value in record.__dict__.items()
            if key not in _RESERVED_LOG_RECORD_ATTRS and not key.startswith("_")
        }
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)

    def _field_value(self, key: str, value: Any) -> Any:
        if self.include_content or key not in CONTENT_FIELDS:
            return value
        return f"<redacted {len(str(value))} chars>"


def configure_logging(level: str) -> None:
    """Configure root logging with structured JSON output."""

    root = logging.getLogger()

    # Re-configuring must not duplicate output.
    for handler in list(root.handlers):
        root.removeHandler(handler)

    root.setLevel(level.upper())

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonFormatter(include_content=root.level <= logging.DEBUG))
    root.addHandler(handler)

    # urllib3 logs every connection at DEBUG.
    logging.getLogger("urllib3").setLevel(max(root.level, logging.INFO))
