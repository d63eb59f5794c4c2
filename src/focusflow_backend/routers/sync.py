from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from focusflow_backend.db import get_session
from focusflow_backend.deps import get_current_user
from focusflow_backend.models import User
from focusflow_backend.schemas_sync import (
    SyncRequest,
    SyncResponse,
    SyncStatusRequest,
    SyncStatusResponse,
)
from focusflow_backend.services import sync_service

router = APIRouter(prefix="/sync", tags=["sync"])


@router.post("", response_model=SyncResponse)
async def sync_data(
    payload: SyncRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> SyncResponse:
    # Owner always comes from the authenticated user, never from the body.
    return await sync_service.sync_user_data(session=session, user_id=user.id, req=payload)


@router.get("/status", response_model=SyncStatusResponse)
async def get_sync_status(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> SyncStatusResponse:
    statuses = await sync_service.get_sync_status(session=session, user_id=user.id)
    return SyncStatusResponse(status=statuses)


@router.post("/status", response_model=SyncStatusResponse)
async def compare_sync_status(
    payload: SyncStatusRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> SyncStatusResponse:
    statuses = await sync_service.get_sync_status(session=session, user_id=user.id, known=payload)
    return SyncStatusResponse(status=statuses)
