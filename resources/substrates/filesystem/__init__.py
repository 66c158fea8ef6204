"""Filesystem substrate resource exports."""

from resources.substrates.filesystem.config import (
    STAGING_SUFFIX,
    FilesystemSubstrateSettings,
)
from resources.substrates.filesystem.directories import (
    ensure_parents,
    prune_empty_ancestors,
    remove_tree,
)
from resources.substrates.filesystem.staging import StagedFile

__all__ = [
    "STAGING_SUFFIX",
    "FilesystemSubstrateSettings",
    "StagedFile",
    "ensure_parents",
    "prune_empty_ancestors",
    "remove_tree",
]
