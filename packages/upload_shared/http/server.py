"""FastAPI and uvicorn helpers for streaming request handling."""

from __future__ import annotations

import io
from typing import IO, AsyncIterator

import anyio.from_thread
import uvicorn
from fastapi import FastAPI, Request
from starlette.datastructures import UploadFile
from starlette.requests import ClientDisconnect

from .errors import InvalidBodyError, MissingHeaderError, RequestBodyReadError

MULTIPART_FIELD = "file"


def create_app(*, title: str = "upload-server", version: str = "0.0.0") -> FastAPI:
    """Create a FastAPI app with project defaults."""
    return FastAPI(
        title=title,
        version=version,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )


def run_app(
    app: FastAPI,
    *,
    host: str = "127.0.0.1",
    port: int = 8000,
    log_level: str = "info",
) -> None:
    """Run one FastAPI app through uvicorn."""
    uvicorn.run(app, host=host, port=port, log_level=log_level)


def get_header(
    request: Request,
    name: str,
    *,
    required: bool = True,
    strip: bool = True,
) -> str | None:
    """Fetch one header value and optionally enforce presence."""
    value = request.headers.get(name)
    if value is None:
        if required:
            raise MissingHeaderError(
                message=f"Missing required header: {name}",
                header_name=name,
            )
        return None

    if strip:
        value = value.strip()
    if required and value == "":
        raise MissingHeaderError(
            message=f"Missing required header: {name}",
            header_name=name,
        )
    return value


class RequestBodyReader(io.RawIOBase):
    """Blocking file-like reader over an ASGI request body stream.

    Intended for worker threads started with ``anyio.to_thread`` (or
    Starlette's ``run_in_threadpool``): each refill hops back onto the event
    loop through ``anyio.from_thread.run`` to pull the next chunk.
    """

    def __init__(self, stream: AsyncIterator[bytes]) -> None:
        super().__init__()
        self._stream = stream
        self._pending = b""
        self._exhausted = False

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: bytearray | memoryview) -> int:  # type: ignore[override]
        while not self._pending:
            if self._exhausted:
                return 0
            try:
                chunk = anyio.from_thread.run(self._next_chunk)
            except ClientDisconnect as exc:
                self._exhausted = True
                raise RequestBodyReadError("client disconnected during upload") from exc
            if chunk is None:
                self._exhausted = True
                return 0
            self._pending = chunk

        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size

    async def _next_chunk(self) -> bytes | None:
        """Return the next body chunk, or ``None`` once the stream ends."""
        try:
            return await self._stream.__anext__()
        except StopAsyncIteration:
            return None


async def open_upload_stream(request: Request) -> IO[bytes]:
    """Return a blocking reader for the uploaded bytes of one request.

    ``multipart/form-data`` requests upload through their ``file`` field;
    any other content type uploads the raw body.
    """
    content_type = request.headers.get("content-type", "")
    if not content_type.lower().startswith("multipart/form-data"):
        return io.BufferedReader(RequestBodyReader(request.stream()))

    form = await request.form()
    upload = form.get(MULTIPART_FIELD)
    if not isinstance(upload, UploadFile):
        await form.close()
        raise InvalidBodyError(
            message=f"Multipart upload requires a '{MULTIPART_FIELD}' field"
        )
    return upload.file
