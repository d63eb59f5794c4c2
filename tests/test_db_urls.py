from __future__ import annotations

from pathlib import Path

from focusflow_backend.db_urls import (
    ensure_sqlite_parent_dir,
    normalize_database_url_for_alembic,
    normalize_database_url_for_async,
    sqlite_file_path,
)


def test_async_url_uses_async_drivers() -> None:
    assert normalize_database_url_for_async("sqlite:///./dev.db") == "sqlite+aiosqlite:///./dev.db"
    assert (
        normalize_database_url_for_async("sqlite+aiosqlite:///./dev.db")
        == "sqlite+aiosqlite:///./dev.db"
    )
    assert (
        normalize_database_url_for_async("postgres://u:p@h/db") == "postgresql+psycopg://u:p@h/db"
    )
    assert (
        normalize_database_url_for_async("postgresql+psycopg2://u:p@h/db")
        == "postgresql+psycopg://u:p@h/db"
    )


def test_alembic_url_uses_sync_drivers() -> None:
    assert normalize_database_url_for_alembic("sqlite+aiosqlite:///x.db") == "sqlite:///x.db"
    assert normalize_database_url_for_alembic("postgresql://u@h/db") == "postgresql+psycopg://u@h/db"


def test_sqlite_file_path() -> None:
    assert sqlite_file_path("sqlite:///./data/dev.db") == Path("./data/dev.db")
    assert sqlite_file_path("sqlite+aiosqlite:///./dev.db") == Path("./dev.db")
    assert sqlite_file_path("sqlite:///:memory:") is None
    assert sqlite_file_path("sqlite://") is None
    assert sqlite_file_path("postgresql+psycopg://u@h/db") is None


def test_ensure_sqlite_parent_dir_creates_missing_dirs(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "data" / "focusflow.db"
    ensure_sqlite_parent_dir(f"sqlite+aiosqlite:///{target}")
    assert target.parent.is_dir()
