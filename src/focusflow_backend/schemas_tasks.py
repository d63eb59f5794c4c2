from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field


TaskStatus = Literal["todo", "doing", "done"]
TaskPriority = Literal["low", "medium", "high"]


class TaskOut(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    version: int
    created_at: datetime
    updated_at: datetime


class TaskCreateRequest(BaseModel):
    id: UUID | None = None
    title: str = Field(min_length=1, max_length=500)
    description: str = ""
    status: TaskStatus = "todo"
    priority: TaskPriority = "medium"


class TaskUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    version: int = Field(ge=0)


class TaskList(BaseModel):
    items: list[TaskOut] = Field(default_factory=list)
    limit: int
    offset: int
