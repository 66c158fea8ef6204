"""Directory lifecycle helpers bounded by the storage root."""

from __future__ import annotations

import errno
import os
import shutil
from pathlib import Path

from packages.upload_shared.logging import fields, get_logger

_LOGGER = get_logger(__name__)

_CONCURRENTLY_CHANGED = frozenset({errno.ENOTEMPTY, errno.EEXIST, errno.ENOENT})


def ensure_parents(target: Path, *, mode: int = 0o755) -> None:
    """Create every missing directory above ``target`` with ``mode``.

    Missing levels are created top-down so each one gets ``mode`` (after the
    process umask). Raises ``OSError`` when creation fails, for example when
    one path component already exists as a regular file.
    """
    missing: list[Path] = []
    current = target.parent
    while not current.is_dir():
        missing.append(current)
        if current.parent == current:
            break
        current = current.parent

    for directory in reversed(missing):
        try:
            os.mkdir(directory, mode)
        except FileExistsError:
            # A concurrent request may have created it first.
            if not directory.is_dir():
                raise


def prune_empty_ancestors(root: Path, start: Path) -> list[Path]:
    """Remove empty directories from ``start`` upwards, stopping at ``root``.

    ``root`` itself is never removed. A ``start`` that no longer exists, or is
    not a directory, is already clean. Returns the removed directories,
    innermost first.
    """
    root_abs = Path(os.path.abspath(root))
    current = Path(os.path.abspath(start))
    removed: list[Path] = []

    while current != root_abs:
        if root_abs not in current.parents:
            _LOGGER.warning(
                "Refusing to prune directory outside storage root",
                extra={fields.DIRECTORY: str(current), "root": str(root_abs)},
            )
            break

        try:
            with os.scandir(current) as entries:
                empty = next(entries, None) is None
        except (FileNotFoundError, NotADirectoryError):
            break
        if not empty:
            break

        try:
            os.rmdir(current)
        except OSError as exc:
            # A concurrent writer repopulated or removed the directory.
            if exc.errno in _CONCURRENTLY_CHANGED:
                break
            raise
        _LOGGER.debug(
            "Deleted empty directory", extra={fields.DIRECTORY: str(current)}
        )
        removed.append(current)
        current = current.parent

    return removed


def remove_tree(path: Path) -> None:
    """Remove one file, symlink, or directory tree."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
        return
    path.unlink()
