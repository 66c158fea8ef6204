"""Pydantic settings for the filesystem substrate."""

from __future__ import annotations

import stat

from pydantic import BaseModel, ConfigDict, Field, field_validator

STAGING_SUFFIX = ".tmp"


class FilesystemSubstrateSettings(BaseModel):
    """Filesystem substrate runtime settings for staged object writes."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    temp_prefix: str = "upload"
    fsync_writes: bool = True
    directory_mode: int = 0o755
    chunk_size: int = Field(default=64 * 1024, gt=0)

    @field_validator("temp_prefix")
    @classmethod
    def _validate_temp_prefix(cls, value: str) -> str:
        """Require a non-empty temporary filename prefix without separators."""
        normalized = value.strip()
        if normalized == "":
            raise ValueError("temp_prefix is required")
        if "/" in normalized or "\\" in normalized:
            raise ValueError("temp_prefix must not contain path separators")
        return normalized

    @field_validator("directory_mode")
    @classmethod
    def _validate_directory_mode(cls, value: int) -> int:
        """Require a permission mode that keeps the owner able to write."""
        if value < 0 or value > 0o777:
            raise ValueError("directory_mode must be a permission mode")
        if value & stat.S_IRWXU != stat.S_IRWXU:
            raise ValueError("directory_mode must grant the owner rwx")
        return value

    def staging_prefix(self) -> str:
        """Return the hidden filename prefix used for staging files."""
        return f".{self.temp_prefix}-"

    def is_staging_name(self, name: str) -> bool:
        """Return whether one basename follows the staging file convention."""
        return name.startswith(self.staging_prefix()) and name.endswith(STAGING_SUFFIX)
