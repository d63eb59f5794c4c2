from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from focusflow_backend.deps import get_current_user
from focusflow_backend.models import User

router = APIRouter(prefix="/me", tags=["me"])


class MeResponse(BaseModel):
    id: str
    email: str
    name: str
    profile_picture: str | None = None
    created_at: datetime
    last_sync_at: datetime | None = None


@router.get("", response_model=MeResponse)
async def get_me(user: User = Depends(get_current_user)) -> MeResponse:
    return MeResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        profile_picture=user.profile_picture,
        created_at=user.created_at,
        last_sync_at=user.last_sync_at,
    )
