"""Structured JSON logging configuration for lessonbook."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from lessonbook.config import Settings


class JsonFormatter(logging.Formatter):
    """Format log records as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add extra fields passed via ``extra=``
        for key in ("slug", "path", "count"):
            val = getattr(record, key, None)
            if val is not None:
                log_entry[key] = val

        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Configure logging based on LOG_FORMAT and LOG_LEVEL."""
    if settings is None:
        settings = Settings.from_env()

    root = logging.getLogger()

    # Avoid duplicate setup
    if getattr(root, "_lessonbook_configured", False):
        return
    root._lessonbook_configured = True  # type: ignore[attr-defined]

    level = getattr(logging, settings.log_level, logging.INFO)
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if settings.log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))

    root.handlers.clear()
    root.addHandler(handler)
