"""Domain errors raised by stores and pipelines.

The API layer maps each kind to its own status code.
"""
from __future__ import annotations


class StudioError(Exception):
    """Base class for all domain errors."""
    code = "studio_error"


class ValidationError(StudioError):
    """Raised when input is malformed or a required field is missing."""
    code = "validation_error"


class DuplicateKeyError(StudioError):
    """Raised when a unique constraint would be violated."""
    code = "duplicate_key"


class NotFoundError(StudioError):
    """Raised when an id does not exist."""
    code = "not_found"

    def __init__(self, kind: str, entity_id: str):
        super().__init__(f"{kind} {entity_id} not found")
        self.kind = kind
        self.entity_id = entity_id


class StorageIOError(StudioError):
    """Raised when a media file cannot be written or removed."""
    code = "storage_error"


class NotificationError(StudioError):
    """Raised when the external notifier fails.

    ``record_id`` is set when the triggering record was already persisted.
    """
    code = "notification_error"

    def __init__(self, message: str, record_id: str | None = None):
        super().__init__(message)
        self.record_id = record_id
