from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class HabitOut(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    name: str
    color: str
    streak: int
    completed_dates: list[str]
    version: int
    created_at: datetime
    updated_at: datetime


class HabitCreateRequest(BaseModel):
    id: UUID | None = None
    name: str = Field(min_length=1, max_length=200)
    color: str = Field(min_length=1, max_length=32)


class HabitUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    color: str | None = Field(default=None, min_length=1, max_length=32)
    streak: int | None = Field(default=None, ge=0)
    completed_dates: list[str] | None = None
    version: int = Field(ge=0)


class HabitList(BaseModel):
    items: list[HabitOut] = Field(default_factory=list)
    limit: int
    offset: int
