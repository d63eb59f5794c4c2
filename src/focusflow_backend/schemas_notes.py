from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class NoteOut(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    title: str
    content: str
    tags: list[str]
    is_encrypted: bool
    version: int
    created_at: datetime
    updated_at: datetime


class NoteCreateRequest(BaseModel):
    # Optional client-assigned id so offline-created notes keep their identity.
    id: UUID | None = None
    title: str = Field(min_length=1, max_length=500)
    content: str = ""
    tags: list[str] = Field(default_factory=list)
    is_encrypted: bool | None = None


class NoteUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=500)
    content: str | None = None
    tags: list[str] | None = None
    is_encrypted: bool | None = None
    version: int = Field(ge=0)

    @model_validator(mode="after")
    def _ensure_any_field_present(self) -> "NoteUpdateRequest":
        if (
            self.title is None
            and self.content is None
            and self.tags is None
            and self.is_encrypted is None
        ):
            raise ValueError("at least one field must be provided")
        return self


class NoteList(BaseModel):
    items: list[NoteOut] = Field(default_factory=list)
    limit: int
    offset: int
