# pyright: reportArgumentType=false

from __future__ import annotations

from collections.abc import Mapping
from typing import cast

from sqlalchemy import func, or_, update
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import User, VersionedRow, utc_now


def _col(attr: object) -> ColumnElement[object]:
    return cast(ColumnElement[object], attr)


async def find_row(
    session: AsyncSession, model: type[VersionedRow], entity_id: str
) -> VersionedRow | None:
    """Load a row by id regardless of owner or tombstone.

    Callers compare `user_id` themselves so a foreign id can fail closed.
    `populate_existing` refreshes rows already in the identity map after
    conditional UPDATE statements.
    """
    result = await session.exec(
        select(model)
        .where(_col(model.id) == entity_id)
        .execution_options(populate_existing=True)
    )
    return result.first()


async def get_active(
    session: AsyncSession, model: type[VersionedRow], *, user_id: str, entity_id: str
) -> VersionedRow | None:
    result = await session.exec(
        select(model)
        .where(_col(model.user_id) == user_id)
        .where(_col(model.id) == entity_id)
        .where(_col(model.deleted_at).is_(None))
        .execution_options(populate_existing=True)
    )
    return result.first()


async def list_active(
    session: AsyncSession,
    model: type[VersionedRow],
    *,
    user_id: str,
    limit: int,
    offset: int,
    filters: Mapping[str, object] | None = None,
    search: str | None = None,
    search_columns: tuple[str, ...] = (),
) -> list[VersionedRow]:
    stmt = (
        select(model)
        .where(_col(model.user_id) == user_id)
        .where(_col(model.deleted_at).is_(None))
    )
    for name, value in (filters or {}).items():
        stmt = stmt.where(_col(getattr(model, name)) == value)

    term = (search or "").strip()
    if term and search_columns:
        pattern = f"%{term.lower()}%"
        stmt = stmt.where(
            or_(*[func.lower(_col(getattr(model, c))).like(pattern) for c in search_columns])
        )

    stmt = (
        stmt.order_by(_col(model.updated_at).desc(), _col(model.id).asc())
        .offset(offset)
        .limit(limit)
    )
    return list(await session.exec(stmt))


async def list_versions(
    session: AsyncSession, model: type[VersionedRow], *, user_id: str
) -> list[tuple[str, int]]:
    result = await session.exec(
        select(model.id, model.version)
        .where(_col(model.user_id) == user_id)
        .where(_col(model.deleted_at).is_(None))
        .order_by(_col(model.id).asc())
    )
    return [(str(entity_id), int(version)) for entity_id, version in result]


async def insert(
    session: AsyncSession,
    model: type[VersionedRow],
    *,
    user_id: str,
    entity_id: str,
    fields: Mapping[str, object],
    version: int,
) -> VersionedRow:
    now = utc_now()
    row = model(
        id=entity_id,
        user_id=user_id,
        version=version,
        created_at=now,
        updated_at=now,
        **fields,
    )
    session.add(row)
    # Flush so constraint violations surface on this item, not at commit.
    await session.flush()
    return row


async def overwrite(
    session: AsyncSession,
    model: type[VersionedRow],
    *,
    user_id: str,
    entity_id: str,
    fields: Mapping[str, object],
    expected_version: int,
    new_version: int,
) -> bool:
    """Compare-and-swap update. Returns False when the stored version moved.

    Also clears the tombstone: a newer write restores a soft-deleted row.
    """
    result = await session.exec(
        update(model)
        .where(_col(model.id) == entity_id)
        .where(_col(model.user_id) == user_id)
        .where(_col(model.version) == expected_version)
        .values(**fields, version=new_version, updated_at=utc_now(), deleted_at=None)
        .execution_options(synchronize_session=False)
    )
    return int(result.rowcount or 0) == 1


async def soft_delete(
    session: AsyncSession,
    model: type[VersionedRow],
    *,
    user_id: str,
    entity_id: str,
    expected_version: int,
    new_version: int,
) -> bool:
    now = utc_now()
    result = await session.exec(
        update(model)
        .where(_col(model.id) == entity_id)
        .where(_col(model.user_id) == user_id)
        .where(_col(model.version) == expected_version)
        .values(deleted_at=now, version=new_version, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    return int(result.rowcount or 0) == 1


async def touch_last_sync(session: AsyncSession, user_id: str) -> None:
    await session.exec(
        update(User)
        .where(_col(User.id) == user_id)
        .values(last_sync_at=utc_now())
        .execution_options(synchronize_session=False)
    )
