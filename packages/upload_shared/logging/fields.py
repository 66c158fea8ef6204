"""Canonical logging field names for consistent structured output.

These constants define a stable key set for structured logs and context
propagation across the HTTP adapter, the upload service, and the filesystem
substrate.
"""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
EVENT = "event"
EXCEPTION = "exception"

# Request/object fields.
OBJECT_PATH = "object_path"
TARGET_PATH = "target_path"
DIRECTORY = "directory"
ACTION = "action"

# Public API invocation fields.
COMPONENT_ID = "component_id"
API_NAME = "api_name"
PUBLIC_API_INVOCATION_EVENT = "public_api_invocation"
PUBLIC_API_COMPLETION_EVENT = "public_api_completion"
SUCCESS = "success"
STATUS_CODE = "status_code"
DURATION_MS = "duration_ms"
ERRORS = "errors"

# Common service-level fields.
SERVICE = "service"
