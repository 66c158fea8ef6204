"""Typed errors for shared HTTP server helpers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class HttpError(Exception):
    """Base error type for shared HTTP helper failures."""

    message: str

    def __str__(self) -> str:
        """Return the human-readable error message."""
        return self.message


@dataclass(frozen=True)
class HttpServerError(HttpError):
    """Base error type for inbound HTTP parsing/validation helpers."""


@dataclass(frozen=True)
class MissingHeaderError(HttpServerError):
    """Required inbound HTTP header is missing or blank."""

    header_name: str


@dataclass(frozen=True)
class InvalidBodyError(HttpServerError):
    """Inbound HTTP body is invalid for the expected shape."""


class RequestBodyReadError(OSError):
    """Inbound request body stream failed before it was fully received."""
