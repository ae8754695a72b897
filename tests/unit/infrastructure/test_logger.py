# tests/unit/infrastructure/test_logger.py
from __future__ import annotations

import json
import logging
import sys

import pytest

from distributed_cache.config.settings import Settings
from distributed_cache.infrastructure.logging.logger import (
    _JsonFormatter,  # internal but importable
    configure_root_logging,
    get_json_logger,
)


def _capture_log(record_msg: str, level: int = logging.INFO, **extra) -> dict:
    """Emit a log record and return the parsed JSON payload."""
    logger = logging.getLogger("test.logger")
    fmt = _JsonFormatter()
    record = logger.makeRecord(
        name=logger.name,
        level=level,
        fn="test_logger",
        lno=123,
        msg=record_msg,
        args=(),
        exc_info=None,
        extra=extra or None,
    )
    return json.loads(fmt.format(record))


def test_configure_root_logging_installs_json_handler(monkeypatch: pytest.MonkeyPatch) -> None:
    """Root logger should get a JSON formatter and respect LOG_LEVEL."""
    monkeypatch.setenv("LOG_LEVEL", "debug")
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    root.handlers.clear()
    try:
        configure_root_logging()
        configure_root_logging()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, _JsonFormatter)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_json_formatter_basic_fields() -> None:
    payload = _capture_log("hello-world")
    assert payload["message"] == "hello-world"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert "ts" in payload


def test_json_formatter_copies_extra_fields() -> None:
    """Fields passed via ``extra=`` land in the payload; non-JSON values are stringified."""
    payload = _capture_log(
        "Users:: getCache hit",
        cache_prefix="Users:",
        cache_key="42",
        fetch_attempt=2,
        marker=object,
    )
    assert payload["cache_prefix"] == "Users:"
    assert payload["cache_key"] == "42"
    assert payload["fetch_attempt"] == 2
    assert payload["marker"] == str(object)
    assert "pathname" not in payload


def test_json_formatter_includes_request_id_from_record_and_env(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.delenv("REQUEST_ID", raising=False)

    payload = _capture_log("with-record-id", request_id="abc-123")
    assert payload["request_id"] == "abc-123"

    monkeypatch.setenv("REQUEST_ID", "env-id")
    payload = _capture_log("with-env-id")
    assert payload["request_id"] == "env-id"


def test_json_formatter_includes_exception_info() -> None:
    fmt = _JsonFormatter()
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.getLogger("test.logger.exc").makeRecord(
            "test.logger.exc", logging.ERROR, "x", 1, "failure", (), sys.exc_info()
        )

    payload = json.loads(fmt.format(record))
    assert payload["level"] == "ERROR"
    assert payload["exc_type"] == "ValueError"
    assert payload["exc_message"] == "boom"


def test_get_json_logger_propagates() -> None:
    logger = get_json_logger("distributed_cache.test")
    assert logger.name == "distributed_cache.test"
    assert logger.propagate is True


def test_configure_root_logging_takes_level_and_identity_from_settings() -> None:
    """An explicit Settings object drives the level and the stamped identity fields."""
    settings = Settings(log_level="warning", service_name="cache-worker", environment="staging")
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    root.handlers.clear()
    try:
        configure_root_logging(settings=settings)
        assert root.level == logging.WARNING

        formatter = root.handlers[0].formatter
        record = logging.getLogger("test.identity").makeRecord(
            "test.identity", logging.WARNING, "x", 1, "hello", (), None
        )
        payload = json.loads(formatter.format(record))
        assert payload["service"] == "cache-worker"
        assert payload["environment"] == "staging"
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_formatter_without_identity_omits_fields() -> None:
    payload = _capture_log("plain")
    assert "service" not in payload
    assert "environment" not in payload
