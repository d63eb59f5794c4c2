from __future__ import annotations

from typing import Annotated, cast
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from focusflow_backend.config import settings
from focusflow_backend.db import get_session
from focusflow_backend.deps import get_current_user
from focusflow_backend.domain.entity_fields import HABIT_FIELDS
from focusflow_backend.models import Habit, User, VersionedRow
from focusflow_backend.schemas_common import OkResponse
from focusflow_backend.schemas_habits import (
    HabitCreateRequest,
    HabitList,
    HabitOut,
    HabitUpdateRequest,
)
from focusflow_backend.services import entities_service

router = APIRouter(prefix="/habits", tags=["habits"])


def _to_out(row: VersionedRow) -> HabitOut:
    habit = cast(Habit, row)
    return HabitOut(
        id=habit.id,
        name=habit.name,
        color=habit.color,
        streak=habit.streak,
        completed_dates=list(habit.completed_dates or []),
        version=habit.version,
        created_at=habit.created_at,
        updated_at=habit.updated_at,
    )


@router.get("", response_model=HabitList)
async def list_habits(
    limit: Annotated[int, Query(ge=1, le=500)] = settings.entity_list_limit,
    offset: Annotated[int, Query(ge=0)] = 0,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> HabitList:
    rows = await entities_service.list_entities(
        session=session, fields=HABIT_FIELDS, user_id=user.id, limit=limit, offset=offset
    )
    return HabitList(items=[_to_out(r) for r in rows], limit=limit, offset=offset)


@router.get("/{habit_id}", response_model=HabitOut)
async def get_habit(
    habit_id: UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> HabitOut:
    row = await entities_service.get_entity(
        session=session, fields=HABIT_FIELDS, user_id=user.id, entity_id=str(habit_id)
    )
    return _to_out(row)


@router.post("", response_model=HabitOut, status_code=status.HTTP_201_CREATED)
async def create_habit(
    payload: HabitCreateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> HabitOut:
    row = await entities_service.create_entity(
        session=session,
        fields=HABIT_FIELDS,
        user_id=user.id,
        id_=str(payload.id) if payload.id else None,
        payload=payload.model_dump(exclude={"id"}, exclude_none=True),
    )
    return _to_out(row)


@router.put("/{habit_id}", response_model=HabitOut)
async def update_habit(
    habit_id: UUID,
    payload: HabitUpdateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> HabitOut:
    row = await entities_service.update_entity(
        session=session,
        fields=HABIT_FIELDS,
        user_id=user.id,
        entity_id=str(habit_id),
        patch=payload.model_dump(exclude={"version"}, exclude_none=True),
        version=payload.version,
    )
    return _to_out(row)


@router.delete("/{habit_id}", response_model=OkResponse)
async def delete_habit(
    habit_id: UUID,
    version: Annotated[int | None, Query(ge=0)] = None,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> OkResponse:
    await entities_service.delete_entity(
        session=session,
        fields=HABIT_FIELDS,
        user_id=user.id,
        entity_id=str(habit_id),
        version=version,
    )
    return OkResponse()
