"""
Tests for structured logging configuration, JSON formatter and path redaction.
"""
import json
import logging
import sys

from app.core.logging_config import (
    JSONFormatter,
    build_logging_config,
    request_id_context,
)
from app.middleware.request_logging import REDACTED_SEGMENT, redact_path


def make_record(level=logging.INFO, msg="Test message", exc_info=None, **extra):
    record = logging.LogRecord(
        name="app.test",
        level=level,
        pathname="handler.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Tests for the JSONFormatter class."""

    def test_basic_log_entry(self):
        log_entry = json.loads(JSONFormatter().format(make_record()))

        assert "timestamp" in log_entry
        assert log_entry["level"] == "INFO"
        assert log_entry["logger"] == "app.test"
        assert log_entry["message"] == "Test message"
        assert "request_id" not in log_entry
        assert "source" not in log_entry

    def test_request_id_from_context(self):
        token = request_id_context.set("req-123")
        try:
            log_entry = json.loads(JSONFormatter().format(make_record()))
        finally:
            request_id_context.reset(token)

        assert log_entry["request_id"] == "req-123"

    def test_structured_fields(self):
        record = make_record(
            method="GET", path="/v1/stats", status_code=200, duration_ms=3.5,
            unrelated="dropped",
        )
        log_entry = json.loads(JSONFormatter().format(record))

        assert log_entry["method"] == "GET"
        assert log_entry["path"] == "/v1/stats"
        assert log_entry["status_code"] == 200
        assert log_entry["duration_ms"] == 3.5
        assert "unrelated" not in log_entry

    def test_error_includes_source_and_exception(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = make_record(level=logging.ERROR, exc_info=sys.exc_info())

        log_entry = json.loads(JSONFormatter().format(record))

        assert log_entry["source"] == "handler.py:42"
        assert "RuntimeError: boom" in log_entry["exception"]


class TestBuildLoggingConfig:
    def test_plain_format_by_default(self):
        config = build_logging_config("DEBUG", json_output=False)

        assert config["handlers"]["console"]["formatter"] == "default"
        assert config["root"]["level"] == logging.DEBUG
        assert config["loggers"]["app"]["level"] == logging.DEBUG

    def test_json_format(self):
        config = build_logging_config("warning", json_output=True)

        assert config["handlers"]["console"]["formatter"] == "json"
        assert config["root"]["level"] == logging.WARNING

    def test_unknown_level_defaults_to_info(self):
        config = build_logging_config("CHATTY", json_output=False)
        assert config["root"]["level"] == logging.INFO

    def test_noisy_loggers_quieted(self):
        config = build_logging_config("DEBUG", json_output=False)
        assert config["loggers"]["uvicorn.access"]["level"] == logging.WARNING
        assert config["loggers"]["sqlalchemy.engine"]["level"] == logging.WARNING


class TestRedactPath:
    def test_token_segment_redacted(self):
        assert redact_path("/v1/results/aaa.bbb.ccc") == f"/v1/results/{REDACTED_SEGMENT}"

    def test_uuid_handle_kept(self):
        path = "/v1/results/0b6f3a52-8f7e-4c1b-9d2a-3e4f5a6b7c8d"
        assert redact_path(path) == path

    def test_plain_paths_unchanged(self):
        assert redact_path("/v1/stats/percentile") == "/v1/stats/percentile"
        assert redact_path("/") == "/"
