from __future__ import annotations

from typing import Annotated, cast
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from focusflow_backend.config import settings
from focusflow_backend.db import get_session
from focusflow_backend.deps import get_current_user
from focusflow_backend.domain.entity_fields import NOTE_FIELDS
from focusflow_backend.models import Note, User, VersionedRow
from focusflow_backend.schemas_common import OkResponse
from focusflow_backend.schemas_notes import (
    NoteCreateRequest,
    NoteList,
    NoteOut,
    NoteUpdateRequest,
)
from focusflow_backend.services import entities_service

router = APIRouter(prefix="/notes", tags=["notes"])


def _to_out(row: VersionedRow) -> NoteOut:
    note = cast(Note, row)
    return NoteOut(
        id=note.id,
        title=note.title,
        content=note.content,
        tags=list(note.tags or []),
        is_encrypted=note.is_encrypted,
        version=note.version,
        created_at=note.created_at,
        updated_at=note.updated_at,
    )


@router.get("", response_model=NoteList)
async def list_notes(
    limit: Annotated[int, Query(ge=1, le=500)] = settings.entity_list_limit,
    offset: Annotated[int, Query(ge=0)] = 0,
    search: Annotated[str | None, Query(max_length=200)] = None,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> NoteList:
    rows = await entities_service.list_entities(
        session=session,
        fields=NOTE_FIELDS,
        user_id=user.id,
        limit=limit,
        offset=offset,
        search=search,
        search_columns=("title", "content"),
    )
    return NoteList(items=[_to_out(r) for r in rows], limit=limit, offset=offset)


@router.get("/{note_id}", response_model=NoteOut)
async def get_note(
    note_id: UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> NoteOut:
    row = await entities_service.get_entity(
        session=session, fields=NOTE_FIELDS, user_id=user.id, entity_id=str(note_id)
    )
    return _to_out(row)


@router.post("", response_model=NoteOut, status_code=status.HTTP_201_CREATED)
async def create_note(
    payload: NoteCreateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> NoteOut:
    row = await entities_service.create_entity(
        session=session,
        fields=NOTE_FIELDS,
        user_id=user.id,
        id_=str(payload.id) if payload.id else None,
        payload=payload.model_dump(exclude={"id"}, exclude_none=True),
    )
    return _to_out(row)


@router.put("/{note_id}", response_model=NoteOut)
async def update_note(
    note_id: UUID,
    payload: NoteUpdateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> NoteOut:
    row = await entities_service.update_entity(
        session=session,
        fields=NOTE_FIELDS,
        user_id=user.id,
        entity_id=str(note_id),
        patch=payload.model_dump(exclude={"version"}, exclude_none=True),
        version=payload.version,
    )
    return _to_out(row)


@router.delete("/{note_id}", response_model=OkResponse)
async def delete_note(
    note_id: UUID,
    version: Annotated[int | None, Query(ge=0)] = None,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> OkResponse:
    await entities_service.delete_entity(
        session=session,
        fields=NOTE_FIELDS,
        user_id=user.id,
        entity_id=str(note_id),
        version=version,
    )
    return OkResponse()
