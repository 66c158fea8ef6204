"""Public shared error API for the upload service."""

from . import codes
from .factories import (
    internal_error,
    not_found_error,
    policy_error,
    validation_error,
)
from .types import ErrorCategory, ErrorDetail, http_status_for

__all__ = [
    "ErrorCategory",
    "ErrorDetail",
    "codes",
    "http_status_for",
    "internal_error",
    "not_found_error",
    "policy_error",
    "validation_error",
]
