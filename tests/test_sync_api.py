from __future__ import annotations

import uuid
from typing import Any, cast

import httpx
import pytest
from sqlalchemy.exc import OperationalError

from focusflow_backend.access_tokens import make_access_token
from focusflow_backend.db import session_scope
from focusflow_backend.main import app
from focusflow_backend.models import User
from focusflow_backend.repositories import entity_repo


def _make_async_client() -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


async def _make_user(google_id: str, *, is_active: bool = True) -> dict[str, str]:
    user_id = str(uuid.uuid4())
    async with session_scope() as session:
        session.add(
            User(
                id=user_id,
                google_id=google_id,
                email=f"{google_id}@example.com",
                name=google_id,
                is_active=is_active,
            )
        )
        await session.commit()
    return {"Authorization": f"Bearer {make_access_token(user_id)}"}


@pytest.mark.anyio
async def test_health_is_public() -> None:
    async with _make_async_client() as client:
        r = await client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}
    assert r.headers.get("x-request-id")


@pytest.mark.anyio
async def test_sync_requires_bearer_token(sqlite_db: str) -> None:
    async with _make_async_client() as client:
        r = await client.post("/api/sync", json={}, headers={"X-Request-Id": "req-123"})
        r_bad = await client.post(
            "/api/sync", json={}, headers={"Authorization": "Bearer not-a-token"}
        )

    assert r.status_code == 401
    assert r.headers.get("x-request-id") == "req-123"
    assert r.json() == {"error": "unauthorized", "message": "missing token", "request_id": "req-123"}
    assert r_bad.status_code == 401
    assert r_bad.json()["message"] == "invalid token"


@pytest.mark.anyio
async def test_sync_rejects_disabled_user(sqlite_db: str) -> None:
    headers = await _make_user("g-disabled", is_active=False)
    async with _make_async_client() as client:
        r = await client.post("/api/sync", json={}, headers=headers)
    assert r.status_code == 403
    assert r.json()["error"] == "forbidden"


@pytest.mark.anyio
async def test_sync_roundtrip_with_conflict(sqlite_db: str) -> None:
    headers = await _make_user("g-sync")
    note_id = str(uuid.uuid4())
    task_id = str(uuid.uuid4())

    async with _make_async_client() as client:
        r = await client.post(
            "/api/sync",
            headers=headers,
            json={
                "notes": [{"id": note_id, "version": 2, "data": {"title": "Plan", "tags": ["w"]}}],
                "tasks": [{"id": task_id, "version": 1, "data": {"title": "Ship"}}],
            },
        )
        assert r.status_code == 200
        body = cast(dict[str, Any], r.json())
        assert body["notes"][0]["action"] == "Created"
        assert body["notes"][0]["data"]["tags"] == ["w"]
        assert body["tasks"][0]["data"]["status"] == "todo"
        assert body["habits"] == []
        assert body["conflicts"] == []
        assert body["errors"] == []

        r_stale = await client.post(
            "/api/sync",
            headers=headers,
            json={"notes": [{"id": note_id, "version": 1, "data": {"title": "Old"}}]},
        )
        assert r_stale.status_code == 200
        stale = cast(dict[str, Any], r_stale.json())
        assert stale["notes"] == [
            {"id": note_id, "version": 2, "action": "Conflict", "data": None}
        ]
        conflict = stale["conflicts"][0]
        assert conflict["entity_type"] == "Note"
        assert conflict["entity_id"] == note_id
        assert conflict["local_version"] == 1
        assert conflict["server_version"] == 2
        assert conflict["server_data"]["title"] == "Plan"

        r_me = await client.get("/api/me", headers=headers)
        assert r_me.status_code == 200
        assert r_me.json()["last_sync_at"] is not None


@pytest.mark.anyio
async def test_sync_rejects_malformed_body(sqlite_db: str) -> None:
    headers = await _make_user("g-422")
    async with _make_async_client() as client:
        r = await client.post(
            "/api/sync",
            headers=headers,
            json={"notes": [{"id": "not-a-uuid", "version": -1}]},
        )
    assert r.status_code == 422
    body = r.json()
    assert body["error"] == "validation_error"
    assert isinstance(body["details"], list)


@pytest.mark.anyio
async def test_sync_store_failure_maps_to_500(
    sqlite_db: str, monkeypatch: pytest.MonkeyPatch
) -> None:
    headers = await _make_user("g-500")

    async def broken_insert(*_args: object, **_kwargs: object) -> None:
        raise OperationalError("INSERT", {}, Exception("database is locked"))

    monkeypatch.setattr(entity_repo, "insert", broken_insert)

    async with _make_async_client() as client:
        r = await client.post(
            "/api/sync",
            headers=headers,
            json={"habits": [{"id": str(uuid.uuid4()), "version": 1, "data": {"name": "x"}}]},
        )
    assert r.status_code == 500
    body = r.json()
    assert body["error"] == "store_error"
    assert body["request_id"] == r.headers["x-request-id"]


@pytest.mark.anyio
async def test_sync_status_get_and_compare(sqlite_db: str) -> None:
    headers = await _make_user("g-status")
    habit_id = str(uuid.uuid4())

    async with _make_async_client() as client:
        _ = await client.post(
            "/api/sync",
            headers=headers,
            json={"habits": [{"id": habit_id, "version": 4, "data": {"name": "walk"}}]},
        )

        r = await client.get("/api/sync/status", headers=headers)
        assert r.status_code == 200
        assert r.json() == {
            "status": [
                {
                    "entity_type": "Habit",
                    "entity_id": habit_id,
                    "local_version": 4,
                    "server_version": 4,
                    "needs_sync": False,
                    "conflict": False,
                }
            ]
        }

        r_cmp = await client.post(
            "/api/sync/status", headers=headers, json={"habits": {habit_id: 3}}
        )
        assert r_cmp.status_code == 200
        row = r_cmp.json()["status"][0]
        assert (row["local_version"], row["needs_sync"], row["conflict"]) == (3, True, False)


@pytest.mark.anyio
async def test_unknown_api_path_returns_json_404(sqlite_db: str) -> None:
    async with _make_async_client() as client:
        r = await client.get("/api/nope")
    assert r.status_code == 404
    assert r.json()["error"] == "not_found"
