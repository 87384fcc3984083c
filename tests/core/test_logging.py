from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterator

import pytest

from app.core.logging import (
    _ContainerFormatter,
    _JsonFormatter,
    _RequestIdFilter,
    request_id_var,
    setup_logging,
)


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    yield
    setup_logging("info")


def _record(
    level: int = logging.INFO, msg: str = "hello", **extra: object
) -> logging.LogRecord:
    record = logging.LogRecord(
        name="app.test",
        level=level,
        pathname="svc.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


# ---- setup_logging ----


def test_setup_logging_sets_root_level() -> None:
    setup_logging("debug")
    assert logging.getLogger().level == logging.DEBUG

    setup_logging("warning")
    assert logging.getLogger().level == logging.WARNING


def test_setup_logging_defaults_to_info_for_unknown_level() -> None:
    setup_logging("nonexistent")
    assert logging.getLogger().level == logging.INFO


def test_setup_logging_quiets_noisy_libraries_at_debug() -> None:
    setup_logging("debug")
    assert logging.getLogger("uvicorn").level == logging.WARNING
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


def test_setup_logging_installs_single_handler() -> None:
    setup_logging("info")
    setup_logging("info", json_format=True)
    [handler] = logging.getLogger().handlers
    assert isinstance(handler.formatter, _JsonFormatter)


# ---- container formatter ----


def test_container_formatter_excludes_location_for_info() -> None:
    output = _ContainerFormatter().format(_record())
    assert "hello" in output
    assert "[svc.py:" not in output


def test_container_formatter_includes_location_for_warning() -> None:
    output = _ContainerFormatter().format(_record(logging.WARNING, "bad thing"))
    assert "bad thing" in output
    assert "[svc.py:42]" in output


# ---- JSON formatter ----


def test_json_formatter_lifts_domain_fields() -> None:
    record = _record(
        msg="Topic completed",
        request_id="abc-123",
        user_id="u-1",
        topic_id="t-1",
        enrollment_id="e-1",
    )
    parsed = json.loads(_JsonFormatter().format(record))
    assert parsed["message"] == "Topic completed"
    assert parsed["level"] == "INFO"
    assert parsed["logger"] == "app.test"
    assert parsed["request_id"] == "abc-123"
    assert parsed["user_id"] == "u-1"
    assert parsed["topic_id"] == "t-1"
    assert parsed["enrollment_id"] == "e-1"
    assert "course_id" not in parsed


def test_json_formatter_skips_placeholder_request_id() -> None:
    parsed = json.loads(_JsonFormatter().format(_record(request_id="-")))
    assert "request_id" not in parsed


def test_json_formatter_includes_exception_info() -> None:
    try:
        raise ValueError("test error")
    except ValueError:
        record = _record(logging.ERROR, "Something failed")
        record.exc_info = sys.exc_info()
    parsed = json.loads(_JsonFormatter().format(record))
    assert "ValueError: test error" in parsed["exception"]


# ---- request id filter ----


def test_request_id_filter_stamps_current_request() -> None:
    token = request_id_var.set("req-42")
    try:
        record = _record()
        assert _RequestIdFilter().filter(record) is True
        assert record.request_id == "req-42"
    finally:
        request_id_var.reset(token)


def test_request_id_filter_keeps_explicit_value() -> None:
    record = _record(request_id="explicit")
    _RequestIdFilter().filter(record)
    assert record.request_id == "explicit"
