"""init schema (users + notes + tasks + habits)

Revision ID: 20261019_0001
Revises: None
Create Date: 2026-10-19 00:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def _table_exists(table_name: str) -> bool:
    bind = op.get_bind()
    insp = inspect(bind)
    return table_name in insp.get_table_names()


def _versioned_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _versioned_indexes(table_name: str) -> None:
    for col in ("user_id", "created_at", "updated_at", "deleted_at"):
        op.create_index(f"ix_{table_name}_{col}", table_name, [col], unique=False)


def upgrade() -> None:
    if not _table_exists("users"):
        op.create_table(
            "users",
            sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
            sa.Column("google_id", sa.String(length=128), nullable=False),
            sa.Column("email", sa.String(length=320), nullable=False),
            sa.Column("name", sa.String(length=200), nullable=False, server_default=""),
            sa.Column("profile_picture", sa.Text(), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("last_sync_at", sa.DateTime(timezone=True), nullable=True),
        )
        op.create_index("ix_users_google_id", "users", ["google_id"], unique=True)
        op.create_index("ix_users_email", "users", ["email"], unique=False)
        op.create_index("ix_users_is_active", "users", ["is_active"], unique=False)
        op.create_index("ix_users_created_at", "users", ["created_at"], unique=False)

    if not _table_exists("notes"):
        op.create_table(
            "notes",
            *_versioned_columns(),
            sa.Column("title", sa.String(length=500), nullable=False),
            sa.Column("content", sa.Text(), nullable=False),
            sa.Column("tags", sa.JSON(), nullable=False),
            sa.Column("is_encrypted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        )
        _versioned_indexes("notes")

    if not _table_exists("tasks"):
        op.create_table(
            "tasks",
            *_versioned_columns(),
            sa.Column("title", sa.String(length=500), nullable=False),
            sa.Column("description", sa.Text(), nullable=False),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="todo"),
            sa.Column("priority", sa.String(length=20), nullable=False, server_default="medium"),
        )
        _versioned_indexes("tasks")
        op.create_index("ix_tasks_status", "tasks", ["status"], unique=False)
        op.create_index("ix_tasks_priority", "tasks", ["priority"], unique=False)

    if not _table_exists("habits"):
        op.create_table(
            "habits",
            *_versioned_columns(),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("color", sa.String(length=32), nullable=False, server_default="#3b82f6"),
            sa.Column("streak", sa.Integer(), nullable=False, server_default=sa.text("0")),
            sa.Column("completed_dates", sa.JSON(), nullable=False),
        )
        _versioned_indexes("habits")


def downgrade() -> None:
    for table_name in ("habits", "tasks", "notes"):
        for col in ("deleted_at", "updated_at", "created_at", "user_id"):
            op.drop_index(f"ix_{table_name}_{col}", table_name=table_name)
    op.drop_index("ix_tasks_priority", table_name="tasks")
    op.drop_index("ix_tasks_status", table_name="tasks")
    op.drop_table("habits")
    op.drop_table("tasks")
    op.drop_table("notes")

    op.drop_index("ix_users_created_at", table_name="users")
    op.drop_index("ix_users_is_active", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_google_id", table_name="users")
    op.drop_table("users")
