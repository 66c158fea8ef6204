"""Configuration loading with deterministic precedence.

The cascade is always:
1) CLI params
2) Environment variables
3) YAML config file (``--config``, ``$UPLOAD_SERVER_CONFIG_FILE``, or
   ``~/.config/upload-server/config.yaml``)
4) Built-in defaults
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

from pydantic_settings import SettingsConfigDict

from .models import CONFIG_FILE_ENV, DEFAULT_CONFIG_PATH, UploadServerSettings


def resolve_config_path(
    config_path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Return the YAML config path for this process."""
    if config_path is not None:
        return Path(config_path).expanduser()
    env = environ if environ is not None else os.environ
    from_env = env.get(CONFIG_FILE_ENV, "").strip()
    if from_env:
        return Path(from_env).expanduser()
    return DEFAULT_CONFIG_PATH


def load_settings(
    *,
    cli_params: Mapping[str, Any] | None = None,
    config_path: str | Path | None = None,
) -> UploadServerSettings:
    """Load settings by applying the standard precedence cascade."""
    yaml_file = resolve_config_path(config_path)
    bound = type(
        UploadServerSettings.__name__,
        (UploadServerSettings,),
        {
            "__module__": UploadServerSettings.__module__,
            "model_config": SettingsConfigDict(
                yaml_file=yaml_file,
                yaml_file_encoding="utf-8",
            ),
        },
    )
    return bound(**dict(cli_params or {}))
