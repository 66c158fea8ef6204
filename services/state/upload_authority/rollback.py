"""Undo-log of cleanup actions for failed write operations.

Each side effect of a write registers one cleanup action value object before
(or as soon as) it happens. The set runs only on the failure path. It unwinds
newest-first, so a staging file is discarded before its directory chain is
checked for emptiness.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from packages.upload_shared.logging import fields, get_logger
from resources.substrates.filesystem import StagedFile, prune_empty_ancestors

_LOGGER = get_logger(__name__)


class CleanupAction(Protocol):
    """One reversible side effect of a write operation."""

    @property
    def description(self) -> str:
        """Return a short label used in logs."""

    def run(self) -> None:
        """Undo the side effect; raise on failure."""


@dataclass(frozen=True)
class PruneEmptyDirectories:
    """Remove directories left empty under ``root`` starting at ``start``."""

    root: Path
    start: Path

    @property
    def description(self) -> str:
        return f"prune empty directories from {self.start}"

    def run(self) -> None:
        prune_empty_ancestors(self.root, self.start)


@dataclass(frozen=True)
class DiscardStagedFile:
    """Roll back one staging file; a no-op once it was committed."""

    staged: StagedFile

    @property
    def description(self) -> str:
        return f"discard staging file {self.staged.path}"

    def run(self) -> None:
        self.staged.rollback()


@dataclass(frozen=True)
class CleanupFailure:
    """One cleanup action that raised while the set was running."""

    action: CleanupAction
    error: Exception


class RollbackSet:
    """Ordered cleanup actions executed best-effort on failure."""

    def __init__(self) -> None:
        self._actions: list[CleanupAction] = []
        self._ran = False

    def __len__(self) -> int:
        return len(self._actions)

    @property
    def actions(self) -> tuple[CleanupAction, ...]:
        """Return registered actions in registration order."""
        return tuple(self._actions)

    def add(self, action: CleanupAction) -> None:
        """Register one cleanup action."""
        if self._ran:
            raise RuntimeError("rollback set already ran")
        self._actions.append(action)

    def run(self) -> list[CleanupFailure]:
        """Run every action newest-first, logging and collecting failures.

        A failing action never prevents the remaining ones from running, and
        the set runs at most once.
        """
        if self._ran:
            return []
        self._ran = True

        failures: list[CleanupFailure] = []
        for action in reversed(self._actions):
            try:
                action.run()
            except Exception as exc:  # noqa: BLE001
                _LOGGER.error(
                    "Rollback action failed: %s",
                    exc,
                    extra={fields.ACTION: action.description},
                )
                failures.append(CleanupFailure(action=action, error=exc))
        return failures
