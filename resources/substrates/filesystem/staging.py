"""Transactional staging files with atomic promotion.

A ``StagedFile`` collects the bytes of one in-flight write next to its final
target (same directory, same filesystem) and then either promotes them with a
single rename or discards them. Readers of the target path observe the old
content or the new content, never a partial file.
"""

from __future__ import annotations

import os
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import IO

from resources.substrates.filesystem.config import (
    STAGING_SUFFIX,
    FilesystemSubstrateSettings,
)


class StagedFile:
    """One staging file owned by exactly one write operation.

    The handle accepts a single terminal operation. ``commit`` and
    ``rollback`` share one ``finalized`` flag: whichever runs first has the
    external effect and every later call of either is a no-op.
    """

    def __init__(
        self,
        *,
        handle: IO[bytes],
        path: Path,
        target: Path,
        fsync_writes: bool,
    ) -> None:
        self._handle = handle
        self._path = path
        self._target = target
        self._fsync_writes = fsync_writes
        self._finalized = False

    @classmethod
    def open(
        cls, target: Path, *, settings: FilesystemSubstrateSettings
    ) -> "StagedFile":
        """Create a uniquely named staging file in ``target``'s directory."""
        handle = NamedTemporaryFile(
            mode="wb",
            prefix=settings.staging_prefix(),
            suffix=STAGING_SUFFIX,
            dir=target.parent,
            delete=False,
        )
        return cls(
            handle=handle,
            path=Path(handle.name),
            target=target,
            fsync_writes=settings.fsync_writes,
        )

    @property
    def path(self) -> Path:
        """Return the staging file path."""
        return self._path

    @property
    def target(self) -> Path:
        """Return the final path the staged content is promoted to."""
        return self._target

    @property
    def finalized(self) -> bool:
        """Return whether commit or rollback already ran."""
        return self._finalized

    def write(self, data: bytes) -> int:
        """Append bytes to the staging file."""
        if self._finalized:
            raise ValueError(f"staging file already finalized: {self._path}")
        return self._handle.write(data)

    def commit(self) -> None:
        """Close the staging file and atomically promote it onto the target.

        On failure the staging file is removed before the error propagates, so
        no staging file survives a finished operation.
        """
        if self._finalized:
            return
        self._finalized = True

        promoted = False
        try:
            self._close()
            _promote(self._path, self._target)
            promoted = True
        finally:
            if not promoted:
                self._path.unlink(missing_ok=True)

    def rollback(self) -> None:
        """Close and delete the staging file, leaving the target untouched."""
        if self._finalized:
            return
        self._finalized = True
        try:
            self._handle.close()
        finally:
            self._path.unlink(missing_ok=True)

    def _close(self) -> None:
        """Flush, optionally fsync, and close the staging handle."""
        try:
            self._handle.flush()
            if self._fsync_writes:
                os.fsync(self._handle.fileno())
        finally:
            self._handle.close()


def _promote(source: Path, target: Path) -> None:
    """Rename ``source`` onto ``target``, replacing any existing file.

    ``os.replace`` overwrites atomically on POSIX and Windows. Filesystems that
    refuse to overwrite get remove-then-rename, during which the target is
    briefly absent.
    """
    try:
        os.replace(source, target)
    except FileExistsError:
        os.remove(target)
        os.replace(source, target)
