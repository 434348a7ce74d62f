# tests/unit/logging/test_unit_logging.py — v1
"""Tests for logging/context.py, logging/logger.py and logging/handlers.py."""

from __future__ import annotations

import json
import logging
import sys
from logging.handlers import RotatingFileHandler

import pytest

from readlearn.logging.context import (
    clear_context,
    get_context,
    set_request_context,
    set_tier,
)
from readlearn.logging.handlers import create_rotating_handler, parse_size
from readlearn.logging.logger import (
    NOISY_LOGGERS,
    ROOT_LOGGER,
    JsonFormatter,
    RequestContextFilter,
    TextFormatter,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _reset():
    clear_context()
    yield
    clear_context()
    root = logging.getLogger(ROOT_LOGGER)
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()
    root.propagate = True
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET)


def _record(msg: str = "hello %s", args=("world",), level=logging.INFO) -> logging.LogRecord:
    return logging.LogRecord("readlearn.test", level, __file__, 1, msg, args, None)


class TestContext:
    def test_empty(self):
        assert get_context().as_dict() == {}

    def test_request_context(self):
        rid = set_request_context("analyze", "req-1")
        set_tier("exact")
        ctx = get_context()
        assert rid == "req-1"
        assert ctx.as_dict() == {"request_id": "req-1", "action": "analyze", "tier": "exact"}

    def test_generated_request_id(self):
        rid = set_request_context("define")
        assert len(rid) == 12
        assert get_context().request_id == rid

    def test_new_request_resets_tier(self):
        set_request_context("analyze", "a")
        set_tier("remote")
        set_request_context("analyze", "b")
        assert get_context().tier is None


class TestFormatters:
    def test_json(self):
        set_request_context("analyze", "req-9")
        record = _record()
        record.data = {"hash": "abc"}
        entry = json.loads(JsonFormatter().format(record))
        assert entry["message"] == "hello world"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "readlearn.test"
        assert entry["context"] == {"request_id": "req-9", "action": "analyze"}
        assert entry["data"] == {"hash": "abc"}

    def test_json_without_context(self):
        entry = json.loads(JsonFormatter().format(_record()))
        assert "context" not in entry

    def test_json_exception(self):
        try:
            raise ValueError("bad")
        except ValueError:
            record = logging.LogRecord(
                "readlearn.test", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )
        entry = json.loads(JsonFormatter().format(record))
        assert "ValueError: bad" in entry["exception"]

    def test_text(self):
        set_request_context("analyze", "req-3")
        set_tier("vector_similarity")
        line = TextFormatter().format(_record(level=logging.WARNING))
        assert "[WARNING ]" in line
        assert "[req-3]" in line
        assert "(vector_similarity)" in line
        assert line.endswith("- hello world")


class TestSetupLogging:
    def test_console_only(self):
        setup_logging(level="DEBUG", log_format="text")
        root = logging.getLogger(ROOT_LOGGER)
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, TextFormatter)

    def test_reinit_does_not_duplicate(self):
        setup_logging()
        setup_logging()
        assert len(logging.getLogger(ROOT_LOGGER).handlers) == 1

    def test_records_not_repeated_by_root_handler(self, capsys):
        stray = logging.StreamHandler(sys.stderr)
        logging.getLogger().addHandler(stray)
        try:
            setup_logging(log_format="text")
            logging.getLogger("readlearn.test").info("once only")
        finally:
            logging.getLogger().removeHandler(stray)
        captured = capsys.readouterr()
        assert captured.out.count("once only") == 1
        assert "once only" not in captured.err
        assert logging.getLogger(ROOT_LOGGER).propagate is False

    def test_with_file(self, tmp_path):
        log_file = tmp_path / "logs" / "readlearn.log"
        setup_logging(log_file=log_file, rotation="1KB", retention=3)
        root = logging.getLogger(ROOT_LOGGER)
        file_handlers = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].maxBytes == 1024
        assert file_handlers[0].backupCount == 3

        logging.getLogger("readlearn.test").info("written")
        file_handlers[0].flush()
        assert "written" in log_file.read_text(encoding="utf-8")


class TestHandlers:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [("10MB", 10 * 1024**2), ("512kb", 512 * 1024), ("2 GB", 2 * 1024**3), ("100", 100), ("7B", 7)],
    )
    def test_parse_size(self, value, expected):
        assert parse_size(value) == expected

    @pytest.mark.parametrize("value", ["", "ten MB", "10TB", "-1MB"])
    def test_parse_size_invalid(self, value):
        with pytest.raises(ValueError):
            parse_size(value)

    def test_creates_parent_dir(self, tmp_path):
        handler = create_rotating_handler(str(tmp_path / "a" / "b" / "x.log"))
        assert (tmp_path / "a" / "b").is_dir()
        handler.close()


class TestRequestContextFilter:
    def test_stamps_record(self):
        set_request_context("define", "req-7")
        set_tier("vocabulary")
        record = _record()
        assert RequestContextFilter().filter(record) is True
        assert (record.request_id, record.action, record.tier) == ("req-7", "define", "vocabulary")

    def test_stamped_context_survives_clear(self):
        set_request_context("analyze", "req-8")
        record = _record()
        RequestContextFilter().filter(record)
        clear_context()
        entry = json.loads(JsonFormatter().format(record))
        assert entry["context"] == {"request_id": "req-8", "action": "analyze"}

    def test_quiets_dependencies(self):
        setup_logging(level="INFO")
        assert logging.getLogger("httpx").level == logging.WARNING
        setup_logging(level="DEBUG")
        assert logging.getLogger("httpx").level == logging.DEBUG
