"""Invocation logging for the upload service's public operations.

``public_api_logged`` wraps one service method so every call produces exactly
two records: a debug record when the call starts and a completion record when
it returns or raises. The outcome is read from the returned ``ObjectResult``
(``ok``, ``status_code``, ``errors``); a raised exception counts as failure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import wraps
from time import perf_counter
from typing import Any, Callable, Mapping

from . import fields
from .context import log_context


@dataclass(frozen=True)
class InvocationContext:
    """Identifies one call of one public operation."""

    component_id: str
    api_name: str
    references: Mapping[str, str] = field(default_factory=dict)

    def log_fields(self) -> dict[str, object]:
        """Return the structured fields shared by both records of this call."""
        return {
            fields.COMPONENT_ID: self.component_id,
            fields.API_NAME: self.api_name,
            **self.references,
        }


@dataclass(frozen=True)
class CompletionContext:
    """Outcome of one finished call."""

    invocation: InvocationContext
    success: bool
    status_code: int | None
    duration_ms: float
    errors: list[str]


class PublicApiLoggingConcern:
    """Turns invocation and completion contexts into log records."""

    def __init__(self, *, logger: Any) -> None:
        self._logger = logger

    def on_invocation(self, context: InvocationContext) -> None:
        with log_context(
            {fields.EVENT: fields.PUBLIC_API_INVOCATION_EVENT, **context.log_fields()}
        ):
            self._logger.debug("Public API invocation")

    def on_completion(self, context: CompletionContext) -> None:
        payload = {
            fields.EVENT: fields.PUBLIC_API_COMPLETION_EVENT,
            **context.invocation.log_fields(),
            fields.SUCCESS: context.success,
            fields.STATUS_CODE: context.status_code,
            fields.DURATION_MS: context.duration_ms,
            fields.ERRORS: context.errors,
        }
        log = self._logger.info if context.success else self._logger.warning
        with log_context(payload):
            log("Public API completion")


def public_api_logged(
    *,
    logger: Any,
    component_id: str,
    api_name: str | None = None,
    id_fields: tuple[str, ...] = (),
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorate one public operation with invocation/completion logging.

    ``id_fields`` names keyword arguments copied into both records, for example
    the object path of an upload.
    """
    concern = PublicApiLoggingConcern(logger=logger)

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        name = api_name or func.__name__

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            invocation = InvocationContext(
                component_id=component_id,
                api_name=name,
                references={
                    key: str(kwargs[key])
                    for key in id_fields
                    if kwargs.get(key) not in (None, "")
                },
            )
            _emit(logger, concern.on_invocation, invocation)

            started = perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:  # noqa: BLE001
                _emit(
                    logger,
                    concern.on_completion,
                    _completion(
                        invocation,
                        started,
                        success=False,
                        errors=[f"{type(exc).__name__}: {exc}"],
                    ),
                )
                raise

            success, errors = _result_summary(result)
            _emit(
                logger,
                concern.on_completion,
                _completion(
                    invocation,
                    started,
                    success=success,
                    errors=errors,
                    status_code=getattr(result, "status_code", None),
                ),
            )
            return result

        return wrapper

    return decorator


def _completion(
    invocation: InvocationContext,
    started: float,
    *,
    success: bool,
    errors: list[str],
    status_code: int | None = None,
) -> CompletionContext:
    return CompletionContext(
        invocation=invocation,
        success=success,
        status_code=status_code,
        duration_ms=round((perf_counter() - started) * 1000.0, 3),
        errors=errors,
    )


def _emit(logger: Any, hook: Callable[[Any], None], context: object) -> None:
    """Run one concern hook; a logging failure never fails the call."""
    try:
        hook(context)
    except Exception as exc:  # noqa: BLE001
        logger.warning(
            "Public API logging concern failed",
            extra={fields.ERRORS: [f"{type(exc).__name__}: {exc}"]},
        )


def _result_summary(result: object) -> tuple[bool, list[str]]:
    """Infer success and one-line error summaries from a result value."""
    errors: list[str] = []
    for item in getattr(result, "errors", None) or ():
        message = getattr(item, "message", "")
        if not message:
            continue
        # Multi-line diagnostics (digest parse errors) are cut to one line.
        first_line = str(message).splitlines()[0]
        code = getattr(item, "code", "")
        errors.append(f"{code}: {first_line}" if code else first_line)

    ok = getattr(result, "ok", None)
    if isinstance(ok, bool):
        return ok, errors
    return not errors, errors
