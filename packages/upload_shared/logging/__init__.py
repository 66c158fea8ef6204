"""Public logging API for the upload server.

This package wraps Python's ``logging`` module with opinionated defaults for
stdout emission and structured context propagation.
"""

from .config import (
    JsonFormatter,
    LogfmtFormatter,
    LogFormat,
    PlainFormatter,
    build_formatter,
    configure_logging,
    get_logger,
)
from .context import bind_context, clear_context, get_context, log_context
from .public_api import (
    CompletionContext,
    InvocationContext,
    PublicApiLoggingConcern,
    public_api_logged,
)

__all__ = [
    "bind_context",
    "build_formatter",
    "clear_context",
    "CompletionContext",
    "configure_logging",
    "get_context",
    "get_logger",
    "InvocationContext",
    "JsonFormatter",
    "log_context",
    "LogfmtFormatter",
    "LogFormat",
    "PlainFormatter",
    "PublicApiLoggingConcern",
    "public_api_logged",
]
