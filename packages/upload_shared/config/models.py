"""Typed configuration models for upload server runtime settings."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from resources.substrates.filesystem.config import FilesystemSubstrateSettings

CONFIG_FILE_ENV = "UPLOAD_SERVER_CONFIG_FILE"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "upload-server" / "config.yaml"
ALL_INTERFACES = "0.0.0.0"


class UploadServerSettings(BaseSettings):
    """Root runtime settings resolved from init/env/yaml/defaults sources.

    Environment variables carry no prefix (``ROOT_DIR``, ``TOKEN_PUT``...);
    nested substrate settings use ``__`` (``FILESYSTEM__FSYNC_WRITES``).
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        env_nested_delimiter="__",
        extra="ignore",
        frozen=True,
        nested_model_default_partial_update=True,
    )

    root_dir: str = "/uploads"
    url_base_path: str = "/"
    listen: str = ":80"
    debug: bool = False
    log_format: Literal["text", "json", "logfmt"] = "text"
    auth_header: str = "Authorization"
    auth_header_prefix: str = "Bearer "
    force_digest: bool = False
    token_get: str = ""
    token_put: str = ""
    token_delete: str = ""
    filesystem: FilesystemSubstrateSettings = Field(
        default_factory=FilesystemSubstrateSettings
    )

    @field_validator("root_dir")
    @classmethod
    def _validate_root_dir(cls, value: str) -> str:
        """Require a non-empty root directory path."""
        normalized = value.strip()
        if normalized == "":
            raise ValueError("root_dir is required")
        return normalized

    @field_validator("url_base_path")
    @classmethod
    def _normalize_url_base_path(cls, value: str) -> str:
        """Normalize the base path to one leading and one trailing slash."""
        stripped = value.strip().strip("/")
        if stripped == "":
            return "/"
        return f"/{stripped}/"

    @field_validator("listen")
    @classmethod
    def _validate_listen(cls, value: str) -> str:
        """Require a ``host:port`` listen address with a valid port."""
        _split_listen(value)
        return value.strip()

    @field_validator("auth_header")
    @classmethod
    def _validate_auth_header(cls, value: str) -> str:
        """Require a non-empty authentication header name."""
        normalized = value.strip()
        if normalized == "":
            raise ValueError("auth_header is required")
        return normalized

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Apply precedence: init > env > yaml > defaults."""
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls),
        )

    def root_path(self) -> Path:
        """Return the absolute storage root path."""
        return Path(os.path.abspath(Path(self.root_dir).expanduser()))

    def listen_address(self) -> tuple[str, int]:
        """Return the ``(host, port)`` pair to bind."""
        return _split_listen(self.listen)

    def token_for(self, method: str) -> str:
        """Return the configured token for one HTTP method, or empty."""
        return {
            "GET": self.token_get,
            "PUT": self.token_put,
            "DELETE": self.token_delete,
        }.get(method.upper(), "")

    @property
    def log_level(self) -> str:
        """Return the logging level implied by ``debug``."""
        return "DEBUG" if self.debug else "INFO"


def _split_listen(value: str) -> tuple[str, int]:
    """Parse ``host:port`` where an empty host means all interfaces."""
    host, separator, port_text = value.strip().rpartition(":")
    if separator == "":
        raise ValueError(f"listen must be host:port, got {value!r}")
    try:
        port = int(port_text)
    except ValueError as exc:
        raise ValueError(f"listen port must be an integer, got {port_text!r}") from exc
    if not 0 < port < 65536:
        raise ValueError(f"listen port out of range: {port}")
    host = host.strip("[]")
    return (host or ALL_INTERFACES, port)
