"""Public shared HTTP API for upload server packages."""

from .errors import (
    HttpError,
    HttpServerError,
    InvalidBodyError,
    MissingHeaderError,
    RequestBodyReadError,
)
from .server import (
    MULTIPART_FIELD,
    RequestBodyReader,
    create_app,
    get_header,
    open_upload_stream,
    run_app,
)

__all__ = [
    "HttpError",
    "HttpServerError",
    "InvalidBodyError",
    "MULTIPART_FIELD",
    "MissingHeaderError",
    "RequestBodyReadError",
    "RequestBodyReader",
    "create_app",
    "get_header",
    "open_upload_stream",
    "run_app",
]
