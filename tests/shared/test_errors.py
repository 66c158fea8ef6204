"""Unit tests for the shared error taxonomy."""

from __future__ import annotations

import pytest

from packages.upload_shared.errors import (
    ErrorCategory,
    codes,
    http_status_for,
    internal_error,
    not_found_error,
    policy_error,
    validation_error,
)


@pytest.mark.parametrize(
    ("category", "status"),
    [
        (ErrorCategory.VALIDATION, 400),
        (ErrorCategory.POLICY, 401),
        (ErrorCategory.NOT_FOUND, 404),
        (ErrorCategory.INTERNAL, 500),
    ],
)
def test_http_status_for_each_category(category: ErrorCategory, status: int) -> None:
    """Every category should map onto one HTTP status code."""
    assert http_status_for(category) == status


def test_factories_set_category_and_default_code() -> None:
    """Factories should stamp category and a sensible default code."""
    assert validation_error("bad").code == codes.VALIDATION_ERROR
    assert not_found_error("missing").category == ErrorCategory.NOT_FOUND
    assert policy_error("Wrong token").code == codes.WRONG_TOKEN
    assert internal_error("broken").category == ErrorCategory.INTERNAL


def test_factories_copy_metadata() -> None:
    """Metadata should be copied into a plain dict."""
    source = {"path": "a/b"}
    error = validation_error("bad", code=codes.INVALID_OBJECT_PATH, metadata=source)
    source["path"] = "changed"

    assert error.code == codes.INVALID_OBJECT_PATH
    assert error.metadata == {"path": "a/b"}
    assert error.retryable is False
