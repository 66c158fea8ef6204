"""Unit tests for operation result contracts."""

from __future__ import annotations

import pytest

from packages.upload_shared.errors import (
    internal_error,
    not_found_error,
    policy_error,
    validation_error,
)
from services.state.upload_authority.domain import (
    ObjectResult,
    ResponseAlreadyDecidedError,
    ResponseDecision,
)


def test_success_is_empty_204() -> None:
    """Success results carry no message and no errors."""
    result = ObjectResult.success()

    assert result.status_code == 204
    assert result.message == ""
    assert result.ok is True


@pytest.mark.parametrize(
    ("error", "status"),
    [
        (validation_error("bad"), 400),
        (policy_error("Wrong token"), 401),
        (not_found_error("File not found"), 404),
        (internal_error("File could not be saved"), 500),
    ],
)
def test_failure_status_follows_error_category(error: object, status: int) -> None:
    """Failure status codes should be derived from the error category."""
    result = ObjectResult.failure(error)  # type: ignore[arg-type]

    assert result.status_code == status
    assert result.ok is False
    assert result.message == result.errors[0].message


def test_response_decision_accepts_exactly_one_outcome() -> None:
    """A second decision for the same request should be rejected."""
    decision = ResponseDecision()
    assert decision.decided is False

    first = decision.decide(ObjectResult.success())

    assert decision.decided is True
    assert decision.result is first
    with pytest.raises(ResponseAlreadyDecidedError):
        decision.decide(ObjectResult.failure(internal_error("late")))
    assert decision.result is first


def test_undecided_result_access_fails() -> None:
    """Reading an undecided outcome is a programming error."""
    with pytest.raises(RuntimeError, match="not decided"):
        _ = ResponseDecision().result
