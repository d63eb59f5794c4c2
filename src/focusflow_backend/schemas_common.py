from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    ok: bool = True


class OkResponse(BaseModel):
    ok: bool = True


class ErrorResponse(BaseModel):
    """Error envelope shared by every endpoint."""

    error: str
    message: str
    request_id: str | None = None
    details: object | None = None
