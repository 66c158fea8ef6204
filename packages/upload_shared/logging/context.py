"""Per-request logging fields on top of ``contextvars``.

Fields bound here are attached to every record by ``ContextFilter``. Worker
threads started through ``anyio`` run in a copy of the request's context, so
fields bound while serving one upload never show up on another.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Mapping

_FIELDS: ContextVar[Mapping[str, str]] = ContextVar("upload_log_context", default={})


def _stringified(values: Mapping[str, object]) -> dict[str, str]:
    """Render values as strings, skipping ``None``."""
    return {str(key): str(value) for key, value in values.items() if value is not None}


def get_context() -> dict[str, str]:
    """Return a copy of the fields bound in the current context."""
    return dict(_FIELDS.get())


def bind_context(**values: object) -> None:
    """Add fields to the current context."""
    if values:
        _FIELDS.set({**_FIELDS.get(), **_stringified(values)})


def clear_context(*keys: str) -> None:
    """Drop the named fields, or every field when none are named."""
    if not keys:
        _FIELDS.set({})
        return
    _FIELDS.set({key: value for key, value in _FIELDS.get().items() if key not in keys})


@contextmanager
def log_context(values: Mapping[str, object]) -> Iterator[None]:
    """Bind fields for one block, then restore the previous set."""
    token = _FIELDS.set({**_FIELDS.get(), **_stringified(values)})
    try:
        yield
    finally:
        _FIELDS.reset(token)
