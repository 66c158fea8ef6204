"""Result contracts for upload service operations."""

from __future__ import annotations

from dataclasses import dataclass, field

from packages.upload_shared.errors import ErrorDetail, http_status_for

SUCCESS_STATUS = 204


@dataclass(frozen=True)
class ObjectResult:
    """Status and diagnostic returned to the HTTP layer for one operation."""

    status_code: int
    message: str = ""
    errors: list[ErrorDetail] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Return whether the operation succeeded."""
        return len(self.errors) == 0

    @classmethod
    def success(cls) -> "ObjectResult":
        """Build the empty-body success result."""
        return cls(status_code=SUCCESS_STATUS)

    @classmethod
    def failure(cls, error: ErrorDetail) -> "ObjectResult":
        """Build a failure result whose status follows the error category."""
        return cls(
            status_code=http_status_for(error.category),
            message=error.message,
            errors=[error],
        )


class ResponseAlreadyDecidedError(RuntimeError):
    """A second terminal outcome was recorded for one request."""


class ResponseDecision:
    """Single-assignment holder for the one outcome of a request."""

    def __init__(self) -> None:
        self._result: ObjectResult | None = None

    @property
    def decided(self) -> bool:
        """Return whether an outcome was already recorded."""
        return self._result is not None

    @property
    def result(self) -> ObjectResult:
        """Return the recorded outcome."""
        if self._result is None:
            raise RuntimeError("response not decided")
        return self._result

    def decide(self, result: ObjectResult) -> ObjectResult:
        """Record the request outcome; a second call is a programming error."""
        if self._result is not None:
            raise ResponseAlreadyDecidedError(
                f"response already decided with status {self._result.status_code}"
            )
        self._result = result
        return result
