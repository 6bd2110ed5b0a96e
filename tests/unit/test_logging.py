"""Unit tests for structured logging."""

from __future__ import annotations

import json
import logging

import pytest

from deploy_experimental.logging import (
    REDACTED,
    JsonFormatter,
    configure_logging,
    parse_level,
)


def _record(msg: str, **extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="deploy_experimental.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields() -> None:
    payload = json.loads(JsonFormatter().format(_record("Workflow dispatched", workflow_id=12)))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "deploy_experimental.test"
    assert payload["message"] == "Workflow dispatched"
    assert payload["extra"] == {"workflow_id": 12}


def test_json_formatter_masks_known_secrets() -> None:
    formatter = JsonFormatter(secrets=["ghp_secret123"])

    payload = json.loads(formatter.format(_record("calling with ghp_secret123", ref="ghp_secret123")))

    assert payload["message"] == f"calling with {REDACTED}"
    assert payload["extra"] == {"ref": REDACTED}


def test_json_formatter_masks_bearer_headers_and_sensitive_keys() -> None:
    record = _record(
        "headers: Authorization: Bearer abc.def-123",
        authorization="anything",
        github_token="anything",
    )

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == f"headers: Authorization: Bearer {REDACTED}"
    assert payload["extra"] == {"authorization": REDACTED, "github_token": REDACTED}


def test_json_formatter_keeps_ordinary_prose() -> None:
    message = "Please check your GitHub token has correct permissions"

    assert json.loads(JsonFormatter().format(_record(message)))["message"] == message


@pytest.mark.parametrize(("name", "expected"), [("debug", "DEBUG"), (" Warning ", "WARNING")])
def test_parse_level_normalizes(name: str, expected: str) -> None:
    assert parse_level(name) == expected


def test_parse_level_rejects_unknown() -> None:
    with pytest.raises(ValueError, match="LOG_LEVEL"):
        parse_level("verbose")


def test_configure_logging_replaces_handlers() -> None:
    configure_logging("debug")
    configure_logging("warning", secrets=["t0ken"])

    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JsonFormatter)
    assert logging.getLogger("github").level == logging.WARNING
