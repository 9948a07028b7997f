"""Tests for logging formatters and setup."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterator

import pytest

from settings_sync.logging_config import JsonFormatter, PrettyFormatter, configure_logging


def make_record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        "settings_sync.settings", logging.INFO, __file__, 1, "Updating %s", ("alice",), None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_json_formatter_includes_extra_fields() -> None:
    line = JsonFormatter().format(make_record(nickname="alice", version=2))
    entry = json.loads(line)
    assert entry["level"] == "INFO"
    assert entry["logger"] == "settings_sync.settings"
    assert entry["message"] == "Updating alice"
    assert entry["nickname"] == "alice"
    assert entry["version"] == 2
    assert "time" in entry


def test_json_formatter_renders_exceptions() -> None:
    try:
        raise ValueError("boom")
    except ValueError:
        record = make_record()
        record.exc_info = sys.exc_info()
    entry = json.loads(JsonFormatter().format(record))
    assert "ValueError: boom" in entry["exc_info"]


def test_pretty_formatter_appends_extra() -> None:
    line = PrettyFormatter().format(make_record(nickname="alice"))
    assert "[settings_sync.settings] Updating alice" in line
    assert "nickname='alice'" in line


@pytest.mark.usefixtures("restore_root")
def test_configure_logging_installs_single_handler() -> None:
    configure_logging("debug", "pretty")
    configure_logging("info", "json")
    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JsonFormatter)
    assert root.level == logging.INFO
    assert logging.getLogger("aiormq").level == logging.WARNING
