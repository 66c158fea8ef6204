"""Stdout logging configuration for the upload server.

Three output shapes are supported, selected by ``log_format``:
- ``json``: newline-delimited JSON for log collectors.
- ``logfmt``: ``key=value`` pairs, one record per line.
- ``text``: human-readable lines with a sorted context suffix.

All three include the bound ``contextvars`` context and any ``extra=`` fields.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any, Literal

from . import fields
from .context import bind_context, get_context

LogFormat = Literal["text", "json", "logfmt"]

_RESERVED_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None))
) | {"message", "asctime", "context", "taskName"}


class ContextFilter(logging.Filter):
    """Inject per-request context into each log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        setattr(record, "context", get_context())
        return True


def _record_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Merge bound context and ``extra=`` attributes for one record."""
    payload: dict[str, Any] = {}
    context = getattr(record, "context", None)
    if isinstance(context, dict):
        payload.update(context)
    for key, value in vars(record).items():
        if key in _RESERVED_RECORD_ATTRS or key.startswith("_"):
            continue
        payload[key] = value
    return payload


class JsonFormatter(logging.Formatter):
    """Emit newline-delimited JSON logs with stable core fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            fields.TIMESTAMP: datetime.now(UTC).isoformat(),
            fields.LEVEL: record.levelname,
            fields.LOGGER: record.name,
            fields.MESSAGE: record.getMessage(),
        }
        payload.update(_record_fields(record))

        if record.exc_info:
            payload[fields.EXCEPTION] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str, separators=(",", ":"))


class LogfmtFormatter(logging.Formatter):
    """Emit ``key=value`` lines with values quoted when they need it."""

    def format(self, record: logging.LogRecord) -> str:
        pairs: list[tuple[str, object]] = [
            ("time", datetime.now(UTC).isoformat()),
            ("level", record.levelname.lower()),
            ("logger", record.name),
            ("msg", record.getMessage()),
        ]
        pairs.extend(sorted(_record_fields(record).items()))
        if record.exc_info:
            pairs.append((fields.EXCEPTION, self.formatException(record.exc_info)))
        return " ".join(f"{key}={_logfmt_value(value)}" for key, value in pairs)


class PlainFormatter(logging.Formatter):
    """Human-readable formatter that still appends structured context."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        extra = _record_fields(record)
        if not extra:
            return message
        suffix = " ".join(f"{key}={value}" for key, value in sorted(extra.items()))
        return f"{message} {suffix}"


def _logfmt_value(value: object) -> str:
    """Render one logfmt value, quoting on whitespace, quotes, or ``=``."""
    text = "" if value is None else str(value)
    if text == "" or any(ch in text for ch in ' ="\n\t'):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        return f'"{escaped}"'
    return text


def build_formatter(log_format: LogFormat) -> logging.Formatter:
    """Return the formatter implementing one configured log format."""
    if log_format == "json":
        return JsonFormatter()
    if log_format == "logfmt":
        return LogfmtFormatter()
    return PlainFormatter()


def configure_logging(
    *,
    level: str = "INFO",
    log_format: LogFormat = "text",
    service: str | None = None,
) -> None:
    """Configure root logging with a single stdout handler.

    This function is idempotent for handler setup: existing root handlers are
    replaced to avoid duplicate emissions when called multiple times.
    """
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setLevel(level.upper())
    handler.addFilter(ContextFilter())
    handler.setFormatter(build_formatter(log_format))

    root.addHandler(handler)

    if service:
        bind_context(**{fields.SERVICE: service})


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger using Python's standard logging hierarchy."""
    return logging.getLogger(name)
