"""Canonical error types for the upload service.

This module defines a transport-agnostic error taxonomy. The HTTP adapter maps
categories onto status codes through ``http_status_for``; nothing else in the
service knows about HTTP.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping


class ErrorCategory(str, Enum):
    """High-level error categories shared across layers."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    POLICY = "policy"
    INTERNAL = "internal"


@dataclass(frozen=True)
class ErrorDetail:
    """Structured error object carried by operation results."""

    code: str
    message: str
    category: ErrorCategory
    retryable: bool = False
    metadata: Mapping[str, str] = field(default_factory=dict)


_HTTP_STATUS_BY_CATEGORY: dict[ErrorCategory, int] = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.POLICY: 401,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.INTERNAL: 500,
}


def http_status_for(category: ErrorCategory) -> int:
    """Return the HTTP status code used to report one error category."""
    return _HTTP_STATUS_BY_CATEGORY[category]
