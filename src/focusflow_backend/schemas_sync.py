from __future__ import annotations

from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from focusflow_backend.domain.entity_fields import EntityType


SyncAction = Literal["Created", "Updated", "Deleted", "NoChange", "Conflict"]


class SyncItem(BaseModel):
    id: UUID
    version: int = Field(ge=0)
    deleted: bool = False
    # Required unless `deleted` is true; checked per item so one bad item
    # does not reject the whole batch.
    data: dict[str, Any] | None = None


class SyncRequest(BaseModel):
    notes: list[SyncItem] = Field(default_factory=list)
    tasks: list[SyncItem] = Field(default_factory=list)
    habits: list[SyncItem] = Field(default_factory=list)


class SyncResult(BaseModel):
    id: UUID
    version: int
    action: SyncAction
    data: dict[str, Any] | None = None


class ConflictInfo(BaseModel):
    entity_type: EntityType
    entity_id: UUID
    local_version: int
    server_version: int
    local_data: dict[str, Any] = Field(default_factory=dict)
    server_data: dict[str, Any] = Field(default_factory=dict)


class SyncItemError(BaseModel):
    entity_type: EntityType
    entity_id: UUID
    error: str
    message: str


class SyncResponse(BaseModel):
    notes: list[SyncResult] = Field(default_factory=list)
    tasks: list[SyncResult] = Field(default_factory=list)
    habits: list[SyncResult] = Field(default_factory=list)
    conflicts: list[ConflictInfo] = Field(default_factory=list)
    errors: list[SyncItemError] = Field(default_factory=list)


class SyncStatus(BaseModel):
    entity_type: EntityType
    entity_id: UUID
    local_version: int
    server_version: int
    needs_sync: bool
    conflict: bool


class SyncStatusRequest(BaseModel):
    # Client's last-known versions keyed by entity id.
    notes: dict[UUID, int] = Field(default_factory=dict)
    tasks: dict[UUID, int] = Field(default_factory=dict)
    habits: dict[UUID, int] = Field(default_factory=dict)


class SyncStatusResponse(BaseModel):
    status: list[SyncStatus] = Field(default_factory=list)
