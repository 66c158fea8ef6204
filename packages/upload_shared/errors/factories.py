"""Factory helpers for the error details carried by operation results."""

from __future__ import annotations

from typing import Mapping

from . import codes
from .types import ErrorCategory, ErrorDetail


def validation_error(
    message: str,
    *,
    code: str = codes.VALIDATION_ERROR,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Request content or object path the service cannot accept."""
    return _detail(ErrorCategory.VALIDATION, message, code=code, metadata=metadata)


def not_found_error(
    message: str,
    *,
    code: str = codes.NOT_FOUND,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Addressed object does not exist."""
    return _detail(ErrorCategory.NOT_FOUND, message, code=code, metadata=metadata)


def policy_error(
    message: str,
    *,
    code: str = codes.WRONG_TOKEN,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Request rejected by the per-method token policy."""
    return _detail(ErrorCategory.POLICY, message, code=code, metadata=metadata)


def internal_error(
    message: str,
    *,
    code: str = codes.INTERNAL_ERROR,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Filesystem or server failure outside the client's control."""
    return _detail(ErrorCategory.INTERNAL, message, code=code, metadata=metadata)


def _detail(
    category: ErrorCategory,
    message: str,
    *,
    code: str,
    metadata: Mapping[str, str] | None,
) -> ErrorDetail:
    return ErrorDetail(
        code=code,
        message=message,
        category=category,
        metadata=dict(metadata or {}),
    )
