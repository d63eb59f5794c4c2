from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any

from fastapi import HTTPException, status
from sqlmodel.ext.asyncio.session import AsyncSession

from focusflow_backend.domain.entity_fields import EntityFields
from focusflow_backend.domain.sync_errors import ValidationError
from focusflow_backend.models import VersionedRow
from focusflow_backend.repositories import entity_repo


def _not_found(fields: EntityFields) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"{fields.entity_type.lower()} not found",
    )


def _conflict(fields: EntityFields, row: VersionedRow) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={
            "message": f"{fields.entity_type.lower()} has been modified by another client",
            "details": {"server_snapshot": fields.snapshot(row)},
        },
    )


def _extract(fields: EntityFields, payload: Mapping[str, Any]) -> dict[str, object]:
    try:
        return fields.extract(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc


async def create_entity(
    *,
    session: AsyncSession,
    fields: EntityFields,
    user_id: str,
    id_: str | None,
    payload: Mapping[str, Any],
) -> VersionedRow:
    entity_id = id_ or str(uuid.uuid4())
    values = _extract(fields, payload)

    async with session.begin():
        # Ids are global; never reveal who owns a taken id.
        if await entity_repo.find_row(session, fields.model, entity_id) is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"{fields.entity_type.lower()} id already exists",
            )
        row = await entity_repo.insert(
            session,
            fields.model,
            user_id=user_id,
            entity_id=entity_id,
            fields=values,
            version=1,
        )
    return row


async def get_entity(
    *, session: AsyncSession, fields: EntityFields, user_id: str, entity_id: str
) -> VersionedRow:
    row = await entity_repo.get_active(session, fields.model, user_id=user_id, entity_id=entity_id)
    if row is None:
        raise _not_found(fields)
    return row


async def list_entities(
    *,
    session: AsyncSession,
    fields: EntityFields,
    user_id: str,
    limit: int,
    offset: int,
    filters: Mapping[str, object] | None = None,
    search: str | None = None,
    search_columns: tuple[str, ...] = (),
) -> list[VersionedRow]:
    return await entity_repo.list_active(
        session,
        fields.model,
        user_id=user_id,
        limit=limit,
        offset=offset,
        filters=filters,
        search=search,
        search_columns=search_columns,
    )


async def update_entity(
    *,
    session: AsyncSession,
    fields: EntityFields,
    user_id: str,
    entity_id: str,
    patch: Mapping[str, Any],
    version: int,
) -> VersionedRow:
    """Partial update guarded by the caller's version; stores version + 1."""

    async with session.begin():
        row = await entity_repo.get_active(
            session, fields.model, user_id=user_id, entity_id=entity_id
        )
        if row is None:
            raise _not_found(fields)
        if row.version != version:
            raise _conflict(fields, row)

        merged: dict[str, Any] = fields.serialize(row)
        merged.update(patch)
        values = _extract(fields, merged)

        ok = await entity_repo.overwrite(
            session,
            fields.model,
            user_id=user_id,
            entity_id=entity_id,
            fields=values,
            expected_version=version,
            new_version=version + 1,
        )
        fresh = await entity_repo.find_row(session, fields.model, entity_id)
        if fresh is None:
            raise _not_found(fields)
        if not ok:
            raise _conflict(fields, fresh)
    return fresh


async def delete_entity(
    *,
    session: AsyncSession,
    fields: EntityFields,
    user_id: str,
    entity_id: str,
    version: int | None,
) -> None:
    """Soft delete; bumps the version so sync clients see the tombstone as newer."""

    async with session.begin():
        row = await entity_repo.get_active(
            session, fields.model, user_id=user_id, entity_id=entity_id
        )
        if row is None:
            raise _not_found(fields)
        if version is not None and row.version != version:
            raise _conflict(fields, row)

        ok = await entity_repo.soft_delete(
            session,
            fields.model,
            user_id=user_id,
            entity_id=entity_id,
            expected_version=row.version,
            new_version=row.version + 1,
        )
        if not ok:
            fresh = await entity_repo.find_row(session, fields.model, entity_id)
            raise _conflict(fields, fresh or row)
