from __future__ import annotations

from datetime import datetime, timezone

import pytest

from focusflow_backend.domain.entity_fields import (
    NOTE_FIELDS,
    extract_habit_fields,
    extract_note_fields,
    extract_task_fields,
)
from focusflow_backend.domain.sync_errors import ValidationError
from focusflow_backend.models import Note


def test_note_fields_apply_defaults() -> None:
    assert extract_note_fields({}) == {
        "title": "Untitled",
        "content": "",
        "tags": [],
        "is_encrypted": False,
    }


def test_note_tags_keep_order_and_drop_non_strings() -> None:
    fields = extract_note_fields({"title": "t", "tags": ["b", 1, "a", None, "b"]})
    assert fields["tags"] == ["b", "a", "b"]


def test_task_fields_normalize_and_default() -> None:
    assert extract_task_fields({"title": "x", "status": "Doing"})["status"] == "doing"
    fields = extract_task_fields({})
    assert fields["status"] == "todo"
    assert fields["priority"] == "medium"
    assert fields["title"] == "Untitled"


@pytest.mark.parametrize("payload", [{"status": "archived"}, {"priority": "urgent"}, {"status": 3}])
def test_task_fields_reject_unknown_choices(payload: dict[str, object]) -> None:
    with pytest.raises(ValidationError) as excinfo:
        extract_task_fields(payload)
    assert excinfo.value.code == "validation_error"


def test_habit_fields_defaults() -> None:
    assert extract_habit_fields({}) == {
        "name": "Untitled",
        "color": "#3b82f6",
        "streak": 0,
        "completed_dates": [],
    }


@pytest.mark.parametrize("streak", [-1, True, "3", 1.5])
def test_habit_streak_must_be_non_negative_int(streak: object) -> None:
    with pytest.raises(ValidationError):
        extract_habit_fields({"name": "run", "streak": streak})


def test_note_snapshot_includes_version_and_tombstone() -> None:
    now = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    row = Note(
        id="11111111-1111-1111-1111-111111111111",
        user_id="u1",
        version=7,
        title="hello",
        content="body",
        tags=["x"],
        is_encrypted=True,
        created_at=now,
        updated_at=now,
        deleted_at=now,
    )
    snap = NOTE_FIELDS.snapshot(row)
    assert snap["id"] == row.id
    assert snap["version"] == 7
    assert snap["title"] == "hello"
    assert snap["tags"] == ["x"]
    assert snap["is_encrypted"] is True
    assert snap["updated_at"] == now.isoformat()
    assert snap["deleted_at"] == now.isoformat()
