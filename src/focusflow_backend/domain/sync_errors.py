from __future__ import annotations


class SyncError(Exception):
    """Base class for failures raised while reconciling a sync item."""

    # Stable machine-readable code, echoed to clients.
    code: str = "sync_error"

    def __init__(self, message: str, *, entity_id: str | None = None) -> None:
        super().__init__(message)
        self.message: str = message
        self.entity_id: str | None = entity_id


class ValidationError(SyncError):
    code = "validation_error"


class AuthorizationError(SyncError):
    code = "forbidden"


class ConflictError(SyncError):
    """Stale write detected. Recovered into a ConflictInfo, never surfaced as HTTP."""

    code = "conflict"

    def __init__(
        self,
        message: str,
        *,
        entity_id: str | None = None,
        local_version: int = 0,
    ) -> None:
        super().__init__(message, entity_id=entity_id)
        self.local_version: int = local_version


class StoreError(SyncError):
    """Persistence I/O or constraint failure; aborts the current entity-kind batch."""

    code = "store_error"
