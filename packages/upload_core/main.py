"""Process entrypoint for the upload server, implemented with Typer."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
from fastapi import FastAPI

from packages.upload_shared.config import UploadServerSettings, load_settings
from packages.upload_shared.http import create_app, run_app
from packages.upload_shared.logging import configure_logging, get_logger
from services.state.upload_authority import UploadAuthorityService
from services.state.upload_authority.api import register_routes

SERVICE_NAME = "upload-server"

_LOGGER = get_logger(__name__)

app = typer.Typer(no_args_is_help=True, help="Simple token-guarded upload server")


def build_app(settings: UploadServerSettings) -> FastAPI:
    """Create the storage root and assemble the HTTP application."""
    root = settings.root_path()
    root.mkdir(parents=True, exist_ok=True)

    service = UploadAuthorityService.from_settings(settings)
    http_app = create_app(title=SERVICE_NAME)
    register_routes(app=http_app, service=service, settings=settings)
    return http_app


@app.callback()
def main_callback() -> None:
    """Simple token-guarded upload server."""


@app.command("serve")
def serve(
    config: Path | None = typer.Option(
        None, "--config", help="YAML config file (overrides $UPLOAD_SERVER_CONFIG_FILE)"
    ),
    root_dir: str | None = typer.Option(None, help="Storage root directory"),
    listen: str | None = typer.Option(None, help="Listen address as host:port"),
    url_base_path: str | None = typer.Option(None, help="URL prefix for objects"),
    debug: bool | None = typer.Option(None, "--debug/--no-debug", help="Debug logs"),
    log_format: str | None = typer.Option(None, help="text, json, or logfmt"),
    force_digest: bool | None = typer.Option(
        None, "--force-digest/--no-force-digest", help="Reject uploads without Digest"
    ),
) -> None:
    """Serve the storage root over HTTP."""
    cli_params: dict[str, Any] = {
        key: value
        for key, value in {
            "root_dir": root_dir,
            "listen": listen,
            "url_base_path": url_base_path,
            "debug": debug,
            "log_format": log_format,
            "force_digest": force_digest,
        }.items()
        if value is not None
    }
    settings = load_settings(cli_params=cli_params, config_path=config)
    configure_logging(
        level=settings.log_level,
        log_format=settings.log_format,
        service=SERVICE_NAME,
    )

    http_app = build_app(settings)
    host, port = settings.listen_address()
    _LOGGER.info(
        "Starting simple upload server.",
        extra={
            "root_dir": str(settings.root_path()),
            "listen": f"{host}:{port}",
            "url_base_path": settings.url_base_path,
        },
    )
    run_app(http_app, host=host, port=port, log_level=settings.log_level.lower())


def main() -> None:
    """Run the Typer application."""
    app()


if __name__ == "__main__":
    main()
