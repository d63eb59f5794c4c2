from __future__ import annotations

from typing import Annotated, cast
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from focusflow_backend.config import settings
from focusflow_backend.db import get_session
from focusflow_backend.deps import get_current_user
from focusflow_backend.domain.entity_fields import TASK_FIELDS
from focusflow_backend.models import Task, User, VersionedRow
from focusflow_backend.schemas_common import OkResponse
from focusflow_backend.schemas_tasks import (
    TaskCreateRequest,
    TaskList,
    TaskOut,
    TaskStatus,
    TaskUpdateRequest,
)
from focusflow_backend.services import entities_service

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _to_out(row: VersionedRow) -> TaskOut:
    task = cast(Task, row)
    return TaskOut(
        id=task.id,
        title=task.title,
        description=task.description,
        status=task.status,  # pyright: ignore[reportArgumentType]
        priority=task.priority,  # pyright: ignore[reportArgumentType]
        version=task.version,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


@router.get("", response_model=TaskList)
async def list_tasks(
    limit: Annotated[int, Query(ge=1, le=500)] = settings.entity_list_limit,
    offset: Annotated[int, Query(ge=0)] = 0,
    status_filter: Annotated[TaskStatus | None, Query(alias="status")] = None,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> TaskList:
    rows = await entities_service.list_entities(
        session=session,
        fields=TASK_FIELDS,
        user_id=user.id,
        limit=limit,
        offset=offset,
        filters={"status": status_filter} if status_filter else None,
    )
    return TaskList(items=[_to_out(r) for r in rows], limit=limit, offset=offset)


@router.get("/{task_id}", response_model=TaskOut)
async def get_task(
    task_id: UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> TaskOut:
    row = await entities_service.get_entity(
        session=session, fields=TASK_FIELDS, user_id=user.id, entity_id=str(task_id)
    )
    return _to_out(row)


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: TaskCreateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> TaskOut:
    row = await entities_service.create_entity(
        session=session,
        fields=TASK_FIELDS,
        user_id=user.id,
        id_=str(payload.id) if payload.id else None,
        payload=payload.model_dump(exclude={"id"}, exclude_none=True),
    )
    return _to_out(row)


@router.put("/{task_id}", response_model=TaskOut)
async def update_task(
    task_id: UUID,
    payload: TaskUpdateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> TaskOut:
    row = await entities_service.update_entity(
        session=session,
        fields=TASK_FIELDS,
        user_id=user.id,
        entity_id=str(task_id),
        patch=payload.model_dump(exclude={"version"}, exclude_none=True),
        version=payload.version,
    )
    return _to_out(row)


@router.delete("/{task_id}", response_model=OkResponse)
async def delete_task(
    task_id: UUID,
    version: Annotated[int | None, Query(ge=0)] = None,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> OkResponse:
    await entities_service.delete_entity(
        session=session,
        fields=TASK_FIELDS,
        user_id=user.id,
        entity_id=str(task_id),
        version=version,
    )
    return OkResponse()
