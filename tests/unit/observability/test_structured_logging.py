"""Tests for structured logging."""

from __future__ import annotations

import json
import logging

from reelstore.observability.logging import ConsoleFormatter, JsonFormatter, request_id_var


def make_record(message: str = "Upload committed", **extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="reelstore.services.upload",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def test_fields(self) -> None:
        data = json.loads(JsonFormatter().format(make_record(blob_id="abc")))

        assert data["level"] == "INFO"
        assert data["logger"] == "reelstore.services.upload"
        assert data["message"] == "Upload committed"
        assert data["blob_id"] == "abc"
        assert "request_id" not in data

    def test_request_id_from_context(self) -> None:
        token = request_id_var.set("req-42")
        try:
            data = json.loads(JsonFormatter().format(make_record()))
        finally:
            request_id_var.reset(token)

        assert data["request_id"] == "req-42"

    def test_exception_info(self) -> None:
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            import sys

            record = make_record()
            record.exc_info = sys.exc_info()

        data = json.loads(JsonFormatter().format(record))
        assert data["exception"]["type"] == "RuntimeError"
        assert data["exception"]["message"] == "boom"


class TestConsoleFormatter:
    def test_plain_line(self) -> None:
        token = request_id_var.set("0123456789abcdef")
        try:
            line = ConsoleFormatter(use_colors=False).format(make_record())
        finally:
            request_id_var.reset(token)

        assert "| INFO     | reelstore.services.upload | Upload committed | req=01234567" in line
