# basedpyright: reportAssignmentType=false
# basedpyright: reportIncompatibleVariableOverride=false

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Text
from sqlalchemy.types import JSON as SAJSON
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    __tablename__ = "users"  # pyright: ignore[reportAssignmentType,reportIncompatibleVariableOverride]

    id: str = Field(primary_key=True, min_length=1, max_length=36)
    google_id: str = Field(index=True, unique=True, min_length=1, max_length=128)
    email: str = Field(index=True, max_length=320)
    name: str = Field(default="", max_length=200)
    profile_picture: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    is_active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)
    # Stamped once per successful sync batch.
    last_sync_at: Optional[datetime] = Field(default=None)


class VersionedRow(SQLModel):
    """Columns shared by every syncable entity.

    `version` is the optimistic-concurrency counter; the stored value is the
    source of truth and is only ever moved forward by conditional writes.
    """

    id: str = Field(primary_key=True, min_length=1, max_length=36)
    user_id: str = Field(index=True, foreign_key="users.id", max_length=36)

    version: int = Field(default=1, ge=0)
    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, index=True)
    deleted_at: Optional[datetime] = Field(default=None, index=True)


class Note(VersionedRow, table=True):
    __tablename__ = "notes"  # pyright: ignore[reportAssignmentType,reportIncompatibleVariableOverride]

    title: str = Field(default="Untitled", max_length=500)
    content: str = Field(default="", sa_column=Column(Text, nullable=False))
    tags: list[str] = Field(default_factory=list, sa_column=Column(SAJSON, nullable=False))
    is_encrypted: bool = Field(default=False)


class Task(VersionedRow, table=True):
    __tablename__ = "tasks"  # pyright: ignore[reportAssignmentType,reportIncompatibleVariableOverride]

    title: str = Field(default="Untitled", max_length=500)
    description: str = Field(default="", sa_column=Column(Text, nullable=False))
    status: str = Field(default="todo", index=True, max_length=20)  # todo / doing / done
    priority: str = Field(default="medium", index=True, max_length=20)  # low / medium / high


class Habit(VersionedRow, table=True):
    __tablename__ = "habits"  # pyright: ignore[reportAssignmentType,reportIncompatibleVariableOverride]

    name: str = Field(default="Untitled", max_length=200)
    color: str = Field(default="#3b82f6", max_length=32)
    streak: int = Field(default=0, ge=0)
    # ISO dates (YYYY-MM-DD), kept in client order.
    completed_dates: list[str] = Field(
        default_factory=list, sa_column=Column(SAJSON, nullable=False)
    )
