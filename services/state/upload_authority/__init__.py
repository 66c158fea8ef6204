"""Upload Authority Service exports."""

from services.state.upload_authority.digest import (
    DIGEST_ALGORITHMS,
    DigestValidator,
    HashDigestValidator,
    MultiDigestValidator,
    ParsedDigest,
    parse_digest,
)
from services.state.upload_authority.domain import (
    ObjectResult,
    ResponseAlreadyDecidedError,
    ResponseDecision,
)
from services.state.upload_authority.paths import (
    InvalidObjectPathError,
    resolve_target,
)
from services.state.upload_authority.rollback import (
    CleanupAction,
    CleanupFailure,
    DiscardStagedFile,
    PruneEmptyDirectories,
    RollbackSet,
)
from services.state.upload_authority.service import (
    SERVICE_COMPONENT_ID,
    UploadAuthorityService,
)

__all__ = [
    "DIGEST_ALGORITHMS",
    "SERVICE_COMPONENT_ID",
    "CleanupAction",
    "CleanupFailure",
    "DigestValidator",
    "DiscardStagedFile",
    "HashDigestValidator",
    "InvalidObjectPathError",
    "MultiDigestValidator",
    "ObjectResult",
    "ParsedDigest",
    "PruneEmptyDirectories",
    "ResponseAlreadyDecidedError",
    "ResponseDecision",
    "RollbackSet",
    "UploadAuthorityService",
    "parse_digest",
    "resolve_target",
]
