"""Public API for upload server configuration utilities."""

from .loader import load_settings, resolve_config_path
from .models import (
    CONFIG_FILE_ENV,
    DEFAULT_CONFIG_PATH,
    UploadServerSettings,
)

__all__ = [
    "CONFIG_FILE_ENV",
    "DEFAULT_CONFIG_PATH",
    "UploadServerSettings",
    "load_settings",
    "resolve_config_path",
]
