"""JSON log output must stay machine-parseable: the log pipeline filters on
request and domain fields."""

from __future__ import annotations

import json
import logging
import sys

from gradebook.core.logging import _ContainerFormatter, _JsonFormatter


def _record(msg: str = "test message", args: tuple = (), exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="gradebook.services.grading_service",
        level=logging.ERROR if exc_info else logging.INFO,
        pathname="grading_service.py",
        lineno=1,
        msg=msg,
        args=args,
        exc_info=exc_info,
    )


def test_json_formatter_produces_valid_json() -> None:
    parsed = json.loads(_JsonFormatter().format(_record("Graded %s", ("abc",))))
    assert parsed["level"] == "INFO"
    assert parsed["logger"] == "gradebook.services.grading_service"
    assert parsed["message"] == "Graded abc"
    assert "timestamp" in parsed


def test_json_formatter_includes_request_fields() -> None:
    record = _record()
    record.request_id = "abc-123"  # type: ignore[attr-defined]
    record.method = "PUT"  # type: ignore[attr-defined]
    record.path = "/v1/submissions/x/grade"  # type: ignore[attr-defined]
    record.duration_ms = 12.5  # type: ignore[attr-defined]

    parsed = json.loads(_JsonFormatter().format(record))
    assert parsed["request_id"] == "abc-123"
    assert parsed["method"] == "PUT"
    assert parsed["path"] == "/v1/submissions/x/grade"
    assert parsed["duration_ms"] == 12.5


def test_json_formatter_includes_domain_fields() -> None:
    record = _record()
    record.submission_id = "sub-1"  # type: ignore[attr-defined]
    record.learner_id = "learner-1"  # type: ignore[attr-defined]

    parsed = json.loads(_JsonFormatter().format(record))
    assert parsed["submission_id"] == "sub-1"
    assert parsed["learner_id"] == "learner-1"
    assert "course_id" not in parsed


def test_json_formatter_includes_exception_info() -> None:
    try:
        raise ValueError("test error")
    except ValueError:
        record = _record("Something failed", exc_info=sys.exc_info())

    parsed = json.loads(_JsonFormatter().format(record))
    assert "ValueError: test error" in parsed["exception"]


def test_container_formatter_is_not_json() -> None:
    output = _ContainerFormatter().format(_record("server started"))
    assert "INFO" in output
    assert "server started" in output
    try:
        json.loads(output)
        raise AssertionError("Container format should not be valid JSON")
    except json.JSONDecodeError:
        pass
