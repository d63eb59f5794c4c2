from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from focusflow_backend.domain.entity_fields import (
    HABIT_FIELDS,
    NOTE_FIELDS,
    TASK_FIELDS,
    EntityFields,
)
from focusflow_backend.domain.sync_errors import (
    AuthorizationError,
    ConflictError,
    StoreError,
    ValidationError,
)
from focusflow_backend.domain.sync_resolver import Decision, resolve
from focusflow_backend.models import VersionedRow
from focusflow_backend.repositories import entity_repo
from focusflow_backend.schemas_sync import (
    ConflictInfo,
    SyncItem,
    SyncItemError,
    SyncRequest,
    SyncResponse,
    SyncResult,
    SyncStatus,
    SyncStatusRequest,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemOutcome:
    result: SyncResult
    conflict: ConflictInfo | None = None


class EntitySyncExecutor:
    """Applies resolver decisions for one entity kind.

    Every write is a single conditional statement scoped by (id, owner); a
    write that matches zero rows lost a race and is reported as a conflict.
    """

    def __init__(self, fields: EntityFields) -> None:
        self.fields: EntityFields = fields

    @property
    def entity_type(self) -> str:
        return self.fields.entity_type

    async def create(
        self,
        session: AsyncSession,
        *,
        user_id: str,
        item: SyncItem,
        payload: Mapping[str, Any],
    ) -> SyncResult:
        values = self.fields.extract(payload)
        await entity_repo.insert(
            session,
            self.fields.model,
            user_id=user_id,
            entity_id=str(item.id),
            fields=values,
            version=item.version,
        )
        return SyncResult(id=item.id, version=item.version, action="Created", data=values)

    async def update(
        self,
        session: AsyncSession,
        *,
        user_id: str,
        item: SyncItem,
        payload: Mapping[str, Any],
        expected_version: int,
    ) -> SyncResult:
        values = self.fields.extract(payload)
        ok = await entity_repo.overwrite(
            session,
            self.fields.model,
            user_id=user_id,
            entity_id=str(item.id),
            fields=values,
            expected_version=expected_version,
            new_version=item.version,
        )
        if not ok:
            raise ConflictError(
                f"{self.entity_type} {item.id} changed concurrently",
                entity_id=str(item.id),
                local_version=item.version,
            )
        return SyncResult(id=item.id, version=item.version, action="Updated", data=values)

    def no_change(self, item: SyncItem) -> SyncResult:
        return SyncResult(id=item.id, version=item.version, action="NoChange")

    async def delete(
        self,
        session: AsyncSession,
        *,
        user_id: str,
        item: SyncItem,
        expected_version: int | None,
    ) -> SyncResult:
        # Client may create and delete offline without ever syncing; nothing to tombstone.
        if expected_version is not None:
            ok = await entity_repo.soft_delete(
                session,
                self.fields.model,
                user_id=user_id,
                entity_id=str(item.id),
                expected_version=expected_version,
                new_version=item.version,
            )
            if not ok:
                raise ConflictError(
                    f"{self.entity_type} {item.id} changed concurrently",
                    entity_id=str(item.id),
                    local_version=item.version,
                )
        return SyncResult(id=item.id, version=item.version, action="Deleted")

    async def _conflict(self, session: AsyncSession, item: SyncItem) -> ItemOutcome:
        # Re-read so the client sees the row as it is now, not as first loaded.
        row = await entity_repo.find_row(session, self.fields.model, str(item.id))
        server_version = int(row.version) if row is not None else 0
        server_data = self.fields.snapshot(row) if row is not None else {}
        logger.warning(
            "sync conflict entity_type=%s entity_id=%s local_version=%s server_version=%s",
            self.entity_type,
            item.id,
            item.version,
            server_version,
        )
        return ItemOutcome(
            result=SyncResult(id=item.id, version=server_version, action="Conflict"),
            conflict=ConflictInfo(
                entity_type=self.fields.entity_type,
                entity_id=item.id,
                local_version=item.version,
                server_version=server_version,
                local_data=dict(item.data or {}),
                server_data=server_data,
            ),
        )

    async def sync_item(
        self, session: AsyncSession, *, user_id: str, item: SyncItem
    ) -> ItemOutcome:
        entity_id = str(item.id)
        if not item.deleted and item.data is None:
            raise ValidationError(
                f"{self.entity_type} data is required for non-delete operations",
                entity_id=entity_id,
            )

        try:
            existing: VersionedRow | None = await entity_repo.find_row(
                session, self.fields.model, entity_id
            )
            if existing is not None and existing.user_id != user_id:
                raise AuthorizationError(
                    f"{self.entity_type} is not accessible", entity_id=entity_id
                )

            existing_version = int(existing.version) if existing is not None else None
            decision = resolve(
                existing_version=existing_version,
                incoming_version=item.version,
                deleted=item.deleted,
            )

            if decision is Decision.CONFLICT:
                return await self._conflict(session, item)
            if decision is Decision.NO_CHANGE:
                return ItemOutcome(result=self.no_change(item))

            try:
                if decision is Decision.CREATE:
                    result = await self.create(
                        session, user_id=user_id, item=item, payload=item.data or {}
                    )
                elif decision is Decision.UPDATE:
                    result = await self.update(
                        session,
                        user_id=user_id,
                        item=item,
                        payload=item.data or {},
                        expected_version=cast(int, existing_version),
                    )
                else:
                    result = await self.delete(
                        session, user_id=user_id, item=item, expected_version=existing_version
                    )
            except ConflictError:
                return await self._conflict(session, item)
            return ItemOutcome(result=result)
        except SQLAlchemyError as exc:
            raise StoreError(
                f"failed to sync {self.entity_type} {entity_id}", entity_id=entity_id
            ) from exc


NOTES_EXECUTOR = EntitySyncExecutor(NOTE_FIELDS)
TASKS_EXECUTOR = EntitySyncExecutor(TASK_FIELDS)
HABITS_EXECUTOR = EntitySyncExecutor(HABIT_FIELDS)

# Request/response attribute name -> executor. Kinds touch disjoint tables.
_EXECUTORS: tuple[tuple[str, EntitySyncExecutor], ...] = (
    ("notes", NOTES_EXECUTOR),
    ("tasks", TASKS_EXECUTOR),
    ("habits", HABITS_EXECUTOR),
)


def _item_error(
    executor: EntitySyncExecutor, item: SyncItem, exc: ValidationError | AuthorizationError
) -> SyncItemError:
    return SyncItemError(
        entity_type=executor.fields.entity_type,
        entity_id=item.id,
        error=exc.code,
        message=exc.message,
    )


async def sync_user_data(
    *, session: AsyncSession, user_id: str, req: SyncRequest
) -> SyncResponse:
    """Reconcile a client batch against the store.

    Notes:
    - One transaction per entity-kind list; a StoreError rolls back that list
      and propagates (lists already committed stay committed).
    - Conflicts are collected, never raised.
    - Validation/ownership failures are collected per item.
    - last_sync_at is stamped once, only after every list succeeded.
    """

    response = SyncResponse()

    for kind, executor in _EXECUTORS:
        items: list[SyncItem] = getattr(req, kind)
        if not items:
            continue
        results: list[SyncResult] = getattr(response, kind)

        async with session.begin():
            for item in items:
                try:
                    outcome = await executor.sync_item(session, user_id=user_id, item=item)
                except (ValidationError, AuthorizationError) as exc:
                    logger.warning(
                        "sync item rejected user_id=%s entity_type=%s entity_id=%s error=%s",
                        user_id,
                        executor.entity_type,
                        item.id,
                        exc.code,
                    )
                    response.errors.append(_item_error(executor, item, exc))
                    continue

                results.append(outcome.result)
                if outcome.conflict is not None:
                    response.conflicts.append(outcome.conflict)

    try:
        async with session.begin():
            await entity_repo.touch_last_sync(session, user_id)
    except SQLAlchemyError as exc:
        raise StoreError("failed to record last sync time") from exc

    logger.info(
        "sync done user_id=%s notes=%d tasks=%d habits=%d conflicts=%d errors=%d",
        user_id,
        len(response.notes),
        len(response.tasks),
        len(response.habits),
        len(response.conflicts),
        len(response.errors),
    )
    return response


async def get_sync_status(
    *, session: AsyncSession, user_id: str, known: SyncStatusRequest | None = None
) -> list[SyncStatus]:
    """Per-entity version table for every live note, task and habit.

    Without `known`, local_version mirrors server_version so the client can
    diff against its own bookkeeping. With `known`, ids the client has never
    seen report local_version 0.
    """

    statuses: list[SyncStatus] = []
    for kind, executor in _EXECUTORS:
        known_versions: dict[str, int] | None = None
        if known is not None:
            known_versions = {str(k): int(v) for k, v in getattr(known, kind).items()}

        try:
            rows = await entity_repo.list_versions(
                session, executor.fields.model, user_id=user_id
            )
        except SQLAlchemyError as exc:
            raise StoreError(f"failed to read {executor.entity_type} versions") from exc

        for entity_id, server_version in rows:
            if known_versions is None:
                local_version = server_version
            else:
                local_version = known_versions.get(entity_id, 0)
            statuses.append(
                SyncStatus(
                    entity_type=executor.fields.entity_type,
                    entity_id=entity_id,
                    local_version=local_version,
                    server_version=server_version,
                    needs_sync=local_version != server_version,
                    conflict=local_version > server_version,
                )
            )
    return statuses
