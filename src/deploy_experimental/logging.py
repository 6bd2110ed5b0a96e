"""Structured logging configuration.

Records are emitted as one JSON object per line on stderr, so they never
interleave with the interactive prompts on stdout. The GitHub token is
scrubbed from every record before it is written.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

REDACTED = "***"

# Attributes every LogRecord carries; anything else came in through `extra=`.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}

_SENSITIVE_KEY = re.compile(r"token|authorization|password|secret", re.IGNORECASE)
_BEARER = re.compile(r"\bBearer\s+[A-Za-z0-9_\-\.]+")


def parse_level(name: str) -> str:
    """Return the canonical level name for `name`.

    Raises:
        ValueError: if `name` is not a standard logging level.
    """

    normalized = name.strip().upper()
    known = logging.getLevelNamesMapping()
    if normalized not in known:
        choices = ", ".join(sorted(known, key=known.__getitem__))
        raise ValueError(f"LOG_LEVEL must be one of {choices}, got {name!r}")
    return normalized


class JsonFormatter(logging.Formatter):
    """Format records as JSON, with secrets masked."""

    def __init__(self, secrets: Iterable[str] = ()) -> None:
        super().__init__()
        self._secrets = tuple(s for s in secrets if s)

    def _scrub(self, text: str) -> str:
        for secret in self._secrets:
            text = text.replace(secret, REDACTED)
        return _BEARER.sub(f"Bearer {REDACTED}", text)

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (record)
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra = {
            key: REDACTED if _SENSITIVE_KEY.search(key) else value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return self._scrub(json.dumps(payload, ensure_ascii=False, default=str))


def configure_logging(level: str, *, secrets: Iterable[str] = ()) -> None:
    """Send JSON records at `level` and above to stderr, masking `secrets`."""

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(JsonFormatter(secrets))
    root.addHandler(handler)
    root.setLevel(parse_level(level))

    # PyGithub and urllib3 log request details at DEBUG.
    for name in ("github", "urllib3"):
        logging.getLogger(name).setLevel(max(root.level, logging.INFO))
