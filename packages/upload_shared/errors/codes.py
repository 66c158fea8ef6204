"""Shared error code constants.

These constants are stable machine-readable identifiers attached to every
``ErrorDetail`` surfaced by the upload service. They appear in completion logs
and test assertions; HTTP callers only see the human-readable message.
"""

# Validation
VALIDATION_ERROR = "VALIDATION_ERROR"
INVALID_OBJECT_PATH = "INVALID_OBJECT_PATH"
DIGEST_UNPARSABLE = "DIGEST_UNPARSABLE"
DIGEST_REQUIRED = "DIGEST_REQUIRED"
DIGEST_MISMATCH = "DIGEST_MISMATCH"
INVALID_BODY = "INVALID_BODY"

# Not found
NOT_FOUND = "NOT_FOUND"

# Policy / authorization
MISSING_TOKEN = "MISSING_TOKEN"
WRONG_TOKEN = "WRONG_TOKEN"
WRONG_HEADER_PREFIX = "WRONG_HEADER_PREFIX"

# Filesystem / internal
DIRECTORY_CREATE_FAILED = "DIRECTORY_CREATE_FAILED"
STAGING_CREATE_FAILED = "STAGING_CREATE_FAILED"
BODY_WRITE_FAILED = "BODY_WRITE_FAILED"
COMMIT_FAILED = "COMMIT_FAILED"
STAT_FAILED = "STAT_FAILED"
DELETE_FAILED = "DELETE_FAILED"
DIRECTORY_PRUNE_FAILED = "DIRECTORY_PRUNE_FAILED"
INTERNAL_ERROR = "INTERNAL_ERROR"
