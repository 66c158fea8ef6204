"""Upload/delete orchestration over the filesystem substrate.

A write moves through ``START -> DIRS_ENSURED -> STAGED -> STREAMED`` and ends
either ``COMMITTED`` or ``ROLLED_BACK``. Every filesystem side effect is
registered in a ``RollbackSet`` so any later failure unwinds it; on success
the rollback set never runs.
"""

from __future__ import annotations

from pathlib import Path
from typing import IO

from packages.upload_shared.config import UploadServerSettings
from packages.upload_shared.errors import (
    codes,
    internal_error,
    not_found_error,
    validation_error,
)
from packages.upload_shared.logging import (
    fields,
    get_logger,
    log_context,
    public_api_logged,
)
from resources.substrates.filesystem import (
    FilesystemSubstrateSettings,
    StagedFile,
    ensure_parents,
    prune_empty_ancestors,
    remove_tree,
)
from services.state.upload_authority.digest import parse_digest, supported_algorithms
from services.state.upload_authority.domain import ObjectResult, ResponseDecision
from services.state.upload_authority.paths import (
    InvalidObjectPathError,
    resolve_target,
)
from services.state.upload_authority.rollback import (
    DiscardStagedFile,
    PruneEmptyDirectories,
    RollbackSet,
)
from services.state.upload_authority.streams import FanOutWriter, copy_stream

SERVICE_COMPONENT_ID = "service_upload_authority"

_LOGGER = get_logger(__name__)


class UploadAuthorityService:
    """Transactional, integrity-checked writes and deletes under one root."""

    def __init__(
        self,
        *,
        root: Path,
        filesystem: FilesystemSubstrateSettings,
        force_digest: bool = False,
    ) -> None:
        self._root = root
        self._filesystem = filesystem
        self._force_digest = force_digest

    @classmethod
    def from_settings(cls, settings: UploadServerSettings) -> "UploadAuthorityService":
        """Build the service from process settings."""
        return cls(
            root=settings.root_path(),
            filesystem=settings.filesystem,
            force_digest=settings.force_digest,
        )

    @property
    def root(self) -> Path:
        """Return the storage root."""
        return self._root

    @public_api_logged(
        logger=_LOGGER,
        component_id=SERVICE_COMPONENT_ID,
        id_fields=(fields.OBJECT_PATH,),
    )
    def put_object(
        self,
        *,
        object_path: str,
        body: IO[bytes],
        digest_header: str | None = None,
    ) -> ObjectResult:
        """Store ``body`` at ``object_path`` atomically, verifying any digest."""
        decision = ResponseDecision()
        try:
            target = self._resolve(object_path)
        except InvalidObjectPathError as exc:
            return decision.decide(_invalid_path(exc))

        with log_context(
            {fields.OBJECT_PATH: object_path, fields.TARGET_PATH: target}
        ):
            return self._put(
                decision=decision,
                target=target,
                body=body,
                digest_header=digest_header,
            )

    @public_api_logged(
        logger=_LOGGER,
        component_id=SERVICE_COMPONENT_ID,
        id_fields=(fields.OBJECT_PATH,),
    )
    def delete_object(self, *, object_path: str) -> ObjectResult:
        """Remove the object or directory at ``object_path`` and prune parents."""
        decision = ResponseDecision()
        try:
            target = self._resolve(object_path)
        except InvalidObjectPathError as exc:
            return decision.decide(_invalid_path(exc))

        with log_context(
            {fields.OBJECT_PATH: object_path, fields.TARGET_PATH: target}
        ):
            return self._delete(decision=decision, target=target)

    def _resolve(self, object_path: str) -> Path:
        return resolve_target(
            root=self._root,
            object_path=object_path,
            filesystem=self._filesystem,
        )

    def _put(
        self,
        *,
        decision: ResponseDecision,
        target: Path,
        body: IO[bytes],
        digest_header: str | None,
    ) -> ObjectResult:
        digest = parse_digest(digest_header)
        if digest.errors:
            _LOGGER.error("Error while parsing digest: %s", "; ".join(digest.errors))
            return decision.decide(
                ObjectResult.failure(
                    validation_error(
                        "Digest could not be parsed \n\n" + "\n".join(digest.errors),
                        code=codes.DIGEST_UNPARSABLE,
                    )
                )
            )
        if self._force_digest and not digest.supplied:
            _LOGGER.error("Missing digest")
            return decision.decide(
                ObjectResult.failure(
                    validation_error(
                        _digest_message("Missing digest"),
                        code=codes.DIGEST_REQUIRED,
                    )
                )
            )

        rollback = RollbackSet()
        try:
            rollback.add(PruneEmptyDirectories(root=self._root, start=target.parent))
            try:
                ensure_parents(target, mode=self._filesystem.directory_mode)
            except OSError as exc:
                _LOGGER.warning(
                    "Error while creating directory for file '%s': %s", target, exc
                )
                rollback.run()
                return decision.decide(
                    ObjectResult.failure(
                        internal_error(
                            "Path could not be created. Make sure the path is correct",
                            code=codes.DIRECTORY_CREATE_FAILED,
                        )
                    )
                )

            try:
                staged = StagedFile.open(target, settings=self._filesystem)
            except OSError as exc:
                _LOGGER.error("Error while opening file '%s': %s", target, exc)
                rollback.run()
                return decision.decide(
                    ObjectResult.failure(
                        internal_error(
                            "File could not be created/opened",
                            code=codes.STAGING_CREATE_FAILED,
                        )
                    )
                )
            rollback.add(DiscardStagedFile(staged=staged))

            try:
                written = copy_stream(
                    body,
                    FanOutWriter(staged, digest.validator),
                    chunk_size=self._filesystem.chunk_size,
                )
            except OSError as exc:
                _LOGGER.error("Error while writing file '%s': %s", target, exc)
                rollback.run()
                return decision.decide(
                    ObjectResult.failure(
                        internal_error(
                            "File could not be saved", code=codes.BODY_WRITE_FAILED
                        )
                    )
                )

            if not digest.validator.is_valid():
                _LOGGER.warning("Invalid digest for file '%s'", target)
                rollback.run()
                return decision.decide(
                    ObjectResult.failure(
                        validation_error(
                            _digest_message("Invalid digest"),
                            code=codes.DIGEST_MISMATCH,
                        )
                    )
                )

            try:
                staged.commit()
            except OSError as exc:
                _LOGGER.error("Error while closing file '%s': %s", target, exc)
                rollback.run()
                return decision.decide(
                    ObjectResult.failure(
                        internal_error(
                            "File could not be closed", code=codes.COMMIT_FAILED
                        )
                    )
                )
        except Exception:
            rollback.run()
            raise

        _LOGGER.debug(
            "File '%s' written",
            target,
            extra={"size_bytes": written, "digests": list(digest.validator.algorithms)},
        )
        return decision.decide(ObjectResult.success())

    def _delete(self, *, decision: ResponseDecision, target: Path) -> ObjectResult:
        try:
            target.lstat()
        except FileNotFoundError:
            _LOGGER.debug("File '%s' not found", target)
            return decision.decide(
                ObjectResult.failure(not_found_error("File not found"))
            )
        except OSError as exc:
            _LOGGER.error("Error with file stats '%s': %s", target, exc)
            return decision.decide(
                ObjectResult.failure(
                    internal_error("File could not be deleted", code=codes.STAT_FAILED)
                )
            )

        try:
            remove_tree(target)
        except OSError as exc:
            _LOGGER.error("Error while removing file '%s': %s", target, exc)
            return decision.decide(
                ObjectResult.failure(
                    internal_error(
                        "File could not be deleted", code=codes.DELETE_FAILED
                    )
                )
            )

        try:
            prune_empty_ancestors(self._root, target.parent)
        except OSError as exc:
            _LOGGER.error("Error cleaning empty directories: %s", exc)
            return decision.decide(
                ObjectResult.failure(
                    internal_error(
                        "Could not clean empty directories",
                        code=codes.DIRECTORY_PRUNE_FAILED,
                    )
                )
            )

        _LOGGER.debug("File '%s' deleted", target)
        return decision.decide(ObjectResult.success())


def _invalid_path(exc: InvalidObjectPathError) -> ObjectResult:
    """Map an unusable object path onto a client error."""
    _LOGGER.debug("Rejected object path: %s", exc)
    return ObjectResult.failure(
        validation_error(str(exc), code=codes.INVALID_OBJECT_PATH)
    )


def _digest_message(reason: str) -> str:
    return f"{reason}. Supported algorithms: {supported_algorithms()}"
