from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Literal, cast

from focusflow_backend.domain.sync_errors import ValidationError
from focusflow_backend.models import Habit, Note, Task, VersionedRow


EntityType = Literal["Note", "Task", "Habit"]

TASK_STATUSES = ("todo", "doing", "done")
TASK_PRIORITIES = ("low", "medium", "high")

DEFAULT_TITLE = "Untitled"
DEFAULT_HABIT_COLOR = "#3b82f6"


def _str_or(value: object, default: str) -> str:
    return value if isinstance(value, str) else default


def _bool_or(value: object, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def _str_list(value: object) -> list[str]:
    if not isinstance(value, list):
        return []
    return [v for v in cast(list[object], value) if isinstance(v, str)]


def _choice(payload: Mapping[str, object], key: str, allowed: tuple[str, ...], default: str) -> str:
    value = payload.get(key)
    if value is None:
        return default
    if not isinstance(value, str) or value.strip().lower() not in allowed:
        raise ValidationError(f"invalid {key}: expected one of {', '.join(allowed)}")
    return value.strip().lower()


def extract_note_fields(payload: Mapping[str, object]) -> dict[str, object]:
    return {
        "title": _str_or(payload.get("title"), DEFAULT_TITLE),
        "content": _str_or(payload.get("content"), ""),
        "tags": _str_list(payload.get("tags")),
        "is_encrypted": _bool_or(payload.get("is_encrypted"), False),
    }


def extract_task_fields(payload: Mapping[str, object]) -> dict[str, object]:
    return {
        "title": _str_or(payload.get("title"), DEFAULT_TITLE),
        "description": _str_or(payload.get("description"), ""),
        "status": _choice(payload, "status", TASK_STATUSES, "todo"),
        "priority": _choice(payload, "priority", TASK_PRIORITIES, "medium"),
    }


def extract_habit_fields(payload: Mapping[str, object]) -> dict[str, object]:
    streak_obj = payload.get("streak")
    streak = 0
    if streak_obj is not None:
        # bool is an int subclass; reject it explicitly.
        if isinstance(streak_obj, bool) or not isinstance(streak_obj, int) or streak_obj < 0:
            raise ValidationError("invalid streak: expected a non-negative integer")
        streak = streak_obj

    return {
        "name": _str_or(payload.get("name"), DEFAULT_TITLE),
        "color": _str_or(payload.get("color"), DEFAULT_HABIT_COLOR),
        "streak": streak,
        "completed_dates": _str_list(payload.get("completed_dates")),
    }


def _serialize_note(row: VersionedRow) -> dict[str, object]:
    note = cast(Note, row)
    return {
        "title": note.title,
        "content": note.content,
        "tags": list(note.tags or []),
        "is_encrypted": note.is_encrypted,
    }


def _serialize_task(row: VersionedRow) -> dict[str, object]:
    task = cast(Task, row)
    return {
        "title": task.title,
        "description": task.description,
        "status": task.status,
        "priority": task.priority,
    }


def _serialize_habit(row: VersionedRow) -> dict[str, object]:
    habit = cast(Habit, row)
    return {
        "name": habit.name,
        "color": habit.color,
        "streak": habit.streak,
        "completed_dates": list(habit.completed_dates or []),
    }


@dataclass(frozen=True)
class EntityFields:
    """Kind-specific field projection for a syncable entity."""

    entity_type: EntityType
    model: type[VersionedRow]
    extract: Callable[[Mapping[str, object]], dict[str, object]]
    serialize: Callable[[VersionedRow], dict[str, object]]

    def snapshot(self, row: VersionedRow) -> dict[str, object]:
        # Full server view handed back to clients (conflicts, CRUD conflicts).
        out: dict[str, object] = {"id": row.id, "version": row.version}
        out.update(self.serialize(row))
        out["updated_at"] = row.updated_at.isoformat() if row.updated_at else None
        out["deleted_at"] = row.deleted_at.isoformat() if row.deleted_at else None
        return out


NOTE_FIELDS = EntityFields(
    entity_type="Note", model=Note, extract=extract_note_fields, serialize=_serialize_note
)
TASK_FIELDS = EntityFields(
    entity_type="Task", model=Task, extract=extract_task_fields, serialize=_serialize_task
)
HABIT_FIELDS = EntityFields(
    entity_type="Habit", model=Habit, extract=extract_habit_fields, serialize=_serialize_habit
)
