"""Tests for structured JSON logging."""

from __future__ import annotations

import json
import logging
from typing import Iterator

import pytest

from lessonbook.config import Settings
from lessonbook.logging_config import JsonFormatter, setup_logging


@pytest.fixture
def clean_root() -> Iterator[logging.Logger]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    had_flag = hasattr(root, "_lessonbook_configured")
    if had_flag:
        delattr(root, "_lessonbook_configured")
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    if hasattr(root, "_lessonbook_configured"):
        delattr(root, "_lessonbook_configured")


def test_json_formatter() -> None:
    fmt = JsonFormatter()
    record = logging.LogRecord(
        name="lessonbook.test",
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg="bumped %s",
        args=("pin-versions",),
        exc_info=None,
    )
    record.slug = "pin-versions"  # type: ignore[attr-defined]
    record.count = 3  # type: ignore[attr-defined]

    data = json.loads(fmt.format(record))
    assert data["level"] == "INFO"
    assert data["logger"] == "lessonbook.test"
    assert data["message"] == "bumped pin-versions"
    assert data["slug"] == "pin-versions"
    assert data["count"] == 3
    assert "timestamp" in data


def test_json_formatter_no_extras() -> None:
    fmt = JsonFormatter()
    record = logging.LogRecord(
        name="test", level=logging.WARNING, pathname="", lineno=0,
        msg="warn", args=(), exc_info=None,
    )
    data = json.loads(fmt.format(record))
    assert data["level"] == "WARNING"
    assert "slug" not in data


def test_setup_logging_json(clean_root: logging.Logger) -> None:
    setup_logging(Settings(log_format="json", log_level="DEBUG"))
    assert clean_root.level == logging.DEBUG
    assert len(clean_root.handlers) == 1
    assert isinstance(clean_root.handlers[0].formatter, JsonFormatter)


def test_setup_logging_is_idempotent(clean_root: logging.Logger) -> None:
    setup_logging(Settings(log_format="pretty"))
    handler = clean_root.handlers[0]
    setup_logging(Settings(log_format="json"))
    assert clean_root.handlers == [handler]
    assert not isinstance(handler.formatter, JsonFormatter)


def test_setup_logging_pretty_has_timestamp(clean_root: logging.Logger) -> None:
    setup_logging(Settings(log_format="pretty"))
    formatter = clean_root.handlers[0].formatter
    assert formatter is not None
    assert formatter._fmt == "%(asctime)s %(levelname)s [%(name)s] %(message)s"
