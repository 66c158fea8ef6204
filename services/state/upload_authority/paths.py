"""Mapping of request object paths onto the storage root."""

from __future__ import annotations

import posixpath
from pathlib import Path

from resources.substrates.filesystem import FilesystemSubstrateSettings


class InvalidObjectPathError(ValueError):
    """Object path cannot name a stored object."""


def clean_object_path(object_path: str) -> str:
    """Clean one object path as a rooted POSIX path, without the leading slash.

    Cleaning a rooted path discards leading ``..`` segments, so the result can
    never climb above the storage root.
    """
    cleaned = posixpath.normpath("/" + object_path)
    return cleaned.lstrip("/")


def resolve_target(
    *,
    root: Path,
    object_path: str,
    filesystem: FilesystemSubstrateSettings,
) -> Path:
    """Return the absolute target path for one object path."""
    if "\x00" in object_path:
        raise InvalidObjectPathError("Object path contains a NUL byte")

    relative = clean_object_path(object_path)
    if relative in ("", "."):
        raise InvalidObjectPathError("Object path is empty")

    segments = relative.split("/")
    if filesystem.is_staging_name(segments[-1]):
        raise InvalidObjectPathError("Object name is reserved for staging files")
    return root.joinpath(*segments)
