"""HTTP adapter for the upload authority service.

Wraps the core operations with the outer surface: CORS header injection,
per-method bearer tokens, method dispatch, and static GET serving of the
storage root.
"""

from __future__ import annotations

import os
import secrets
from pathlib import Path
from typing import Awaitable, Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool
from starlette.staticfiles import StaticFiles

from packages.upload_shared.config import UploadServerSettings
from packages.upload_shared.errors import (
    ErrorDetail,
    codes,
    policy_error,
    validation_error,
)
from packages.upload_shared.http import (
    InvalidBodyError,
    get_header,
    open_upload_stream,
)
from packages.upload_shared.logging import get_logger
from resources.substrates.filesystem import FilesystemSubstrateSettings
from services.state.upload_authority.domain import ObjectResult
from services.state.upload_authority.service import UploadAuthorityService

ALLOWED_METHODS = ("OPTIONS", "GET", "PUT", "DELETE")
DIGEST_HEADER = "Digest"

_LOGGER = get_logger(__name__)


class ObjectFiles(StaticFiles):
    """Static file server for the storage root that hides staging files."""

    def __init__(
        self, *, directory: Path, filesystem: FilesystemSubstrateSettings
    ) -> None:
        super().__init__(directory=directory)
        self._filesystem = filesystem

    def lookup_path(self, path: str) -> tuple[str, os.stat_result | None]:
        if self._filesystem.is_staging_name(os.path.basename(path)):
            return "", None
        return super().lookup_path(path)


def register_routes(
    *,
    app: FastAPI,
    service: UploadAuthorityService,
    settings: UploadServerSettings,
) -> None:
    """Register middleware, object routes, and the static file mount."""
    base = settings.url_base_path
    root_paths = {base, base.rstrip("/") or "/"}
    allow = ", ".join(ALLOWED_METHODS)

    @app.middleware("http")
    async def guard_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        response = _reject(request, settings=settings, root_paths=root_paths)
        if response is None:
            _LOGGER.debug("%s: %s", request.method, request.url.path)
            response = await call_next(request)
        response.headers["Access-Control-Allow-Origin"] = "*"
        return response

    async def options_object(object_path: str) -> Response:
        del object_path
        return Response(status_code=200, headers={"Allow": allow})

    async def put_object(object_path: str, request: Request) -> Response:
        try:
            body = await open_upload_stream(request)
        except InvalidBodyError as exc:
            _LOGGER.warning("Rejected upload body for %s: %s", object_path, exc)
            return _to_response(
                ObjectResult.failure(
                    validation_error(str(exc), code=codes.INVALID_BODY)
                )
            )

        try:
            result = await run_in_threadpool(
                service.put_object,
                object_path=object_path,
                body=body,
                digest_header=get_header(request, DIGEST_HEADER, required=False),
            )
        finally:
            await request.close()
        return _to_response(result)

    async def delete_object(object_path: str) -> Response:
        result = await run_in_threadpool(
            service.delete_object, object_path=object_path
        )
        return _to_response(result)

    route = f"{base}{{object_path:path}}"
    app.add_api_route(route, options_object, methods=["OPTIONS"])
    app.add_api_route(route, put_object, methods=["PUT"])
    app.add_api_route(route, delete_object, methods=["DELETE"])
    app.mount(
        base.rstrip("/"),
        ObjectFiles(directory=service.root, filesystem=settings.filesystem),
        name="objects",
    )


def authenticate(
    request: Request, *, settings: UploadServerSettings
) -> ErrorDetail | None:
    """Check the per-method token; return the policy error when rejected.

    The ``token`` query parameter takes precedence over the auth header.
    Methods without a configured token are open.
    """
    expected = settings.token_for(request.method)
    if expected == "":
        return None

    token = request.query_params.get("token", "")
    header = request.headers.get(settings.auth_header)
    if header is not None and token == "":
        if not header.startswith(settings.auth_header_prefix):
            return policy_error("Wrong header prefix", code=codes.WRONG_HEADER_PREFIX)
        token = header[len(settings.auth_header_prefix) :]

    if token == "":
        return policy_error("Missing token", code=codes.MISSING_TOKEN)
    if not secrets.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
        return policy_error("Wrong token", code=codes.WRONG_TOKEN)
    return None


def _reject(
    request: Request,
    *,
    settings: UploadServerSettings,
    root_paths: set[str],
) -> Response | None:
    """Return an early response for requests that never reach a route."""
    method = request.method
    path = request.url.path

    if path in root_paths and method != "GET":
        _LOGGER.debug("Unsupported method %s for /", method)
        return PlainTextResponse(
            "Method not allowed.", status_code=405, headers={"Allow": "GET"}
        )

    error = authenticate(request, settings=settings)
    if error is not None:
        _LOGGER.debug("%s for %s: %s", error.message, method, path)
        return _to_response(ObjectResult.failure(error))

    if method not in ALLOWED_METHODS:
        _LOGGER.debug("Unsupported method %s for %s", method, path)
        return PlainTextResponse(
            "Method not allowed.",
            status_code=405,
            headers={"Allow": ", ".join(ALLOWED_METHODS)},
        )
    return None


def _to_response(result: ObjectResult) -> Response:
    """Map one operation result onto exactly one HTTP response."""
    if result.ok:
        return Response(status_code=result.status_code)
    return PlainTextResponse(result.message, status_code=result.status_code)
