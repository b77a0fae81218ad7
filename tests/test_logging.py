"""Tests for logging setup."""

import json
import logging
from pathlib import Path

from article_site.config import LoggingConfig
from article_site.utils.logging import JsonlFormatter, log_event, setup_logging


def test_setup_logging_writes_jsonl(tmp_path: Path):
    logger = setup_logging(LoggingConfig(console=False), tmp_path)

    log_event(logger, "Build start", event="build_start", content="content/")
    for handler in logger.handlers:
        handler.flush()

    record = json.loads((tmp_path / "build.jsonl").read_text(encoding="utf-8").splitlines()[-1])
    assert record["message"] == "Build start"
    assert record["event"] == "build_start"
    assert record["content"] == "content/"
    assert record["level"] == "INFO"


def test_setup_logging_without_outputs_uses_null_handler():
    logger = setup_logging(LoggingConfig(console=False, file=False), None)

    assert logger.propagate is False
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.NullHandler)


def test_plain_file_format(tmp_path: Path):
    logger = setup_logging(LoggingConfig(console=False, format="plain", filename="build.log"), tmp_path)

    log_event(logger, "hello", level=logging.WARNING)
    for handler in logger.handlers:
        handler.flush()

    assert "WARNING hello" in (tmp_path / "build.log").read_text(encoding="utf-8")


def test_log_event_ignores_missing_logger():
    log_event(None, "nothing happens", event="noop")


def test_jsonl_formatter_serialises_paths():
    record = logging.LogRecord("article_site", logging.INFO, __file__, 1, "msg", None, None)
    record.path = Path("content/a.md")

    payload = json.loads(JsonlFormatter().format(record))

    assert payload["path"] == "content/a.md"


def test_jsonl_formatter_drops_standard_record_attributes():
    record = logging.LogRecord("article_site", logging.INFO, __file__, 1, "msg", None, None)
    record.kind = "BrokenLink"

    payload = json.loads(JsonlFormatter().format(record))

    assert set(payload) == {"timestamp", "level", "logger", "message", "kind"}
