"""Unit tests for structured stdout logging configuration."""

from __future__ import annotations

import json
import logging
from typing import Iterator

import pytest

from packages.upload_shared.logging import (
    JsonFormatter,
    LogfmtFormatter,
    PlainFormatter,
    bind_context,
    build_formatter,
    clear_context,
    configure_logging,
    get_context,
    log_context,
)


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Iterator[None]:
    """Keep root handler and context changes local to each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    clear_context()


def _record(message: str = "hello", **extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        "upload.test", logging.INFO, __file__, 1, message, None, None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_log_context_is_scoped_to_block() -> None:
    """Values bound in a block should disappear after it exits."""
    bind_context(service="upload-server", skipped=None)

    with log_context({"object_path": "a/b.txt"}):
        assert get_context() == {"service": "upload-server", "object_path": "a/b.txt"}

    assert get_context() == {"service": "upload-server"}


def test_clear_context_selected_keys() -> None:
    """Clearing named keys should keep the remaining context."""
    bind_context(a=1, b=2)

    clear_context("a")

    assert get_context() == {"b": "2"}


def test_json_formatter_includes_context_and_extra() -> None:
    """JSON lines should carry core fields plus context and extra values."""
    record = _record("stored", context={"object_path": "x"}, size_bytes=5)

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "upload.test"
    assert payload["message"] == "stored"
    assert payload["object_path"] == "x"
    assert payload["size_bytes"] == 5


def test_logfmt_formatter_quotes_values_when_needed() -> None:
    """Values with spaces, quotes, or ``=`` should be quoted and escaped."""
    record = _record('said "hi"', context={"path": "a b", "plain": "ok"})

    line = LogfmtFormatter().format(record)

    assert "level=info" in line
    assert 'msg="said \\"hi\\""' in line
    assert 'path="a b"' in line
    assert "plain=ok" in line


def test_plain_formatter_appends_sorted_context() -> None:
    """Plain lines should end with a sorted ``key=value`` suffix."""
    record = _record("stored", context={"b": "2", "a": "1"})

    line = PlainFormatter().format(record)

    assert line.endswith("stored a=1 b=2")


@pytest.mark.parametrize(
    ("log_format", "formatter"),
    [("json", JsonFormatter), ("logfmt", LogfmtFormatter), ("text", PlainFormatter)],
)
def test_build_formatter_selects_format(log_format: str, formatter: type) -> None:
    """Each configured format should select its formatter."""
    assert isinstance(build_formatter(log_format), formatter)  # type: ignore[arg-type]


def test_configure_logging_writes_json_to_stdout(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Configured logging should emit one JSON line with the bound service."""
    configure_logging(level="DEBUG", log_format="json", service="upload-server")
    configure_logging(level="DEBUG", log_format="json", service="upload-server")

    logging.getLogger("upload.test").debug("ready", extra={"listen": ":80"})

    lines = [line for line in capsys.readouterr().out.splitlines() if line]
    assert len(lines) == 1
    payload = json.loads(lines[0])
    assert payload["message"] == "ready"
    assert payload["service"] == "upload-server"
    assert payload["listen"] == ":80"
