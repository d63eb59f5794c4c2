from __future__ import annotations

from pathlib import Path

from sqlalchemy.engine import make_url


# Runtime talks to the database through async drivers only.
_ASYNC_DRIVERS: tuple[tuple[str, str], ...] = (
    ("sqlite://", "sqlite+aiosqlite://"),
    ("postgres://", "postgresql+psycopg://"),
    ("postgresql://", "postgresql+psycopg://"),
    ("postgresql+psycopg2://", "postgresql+psycopg://"),
)

# Alembic runs on a sync engine; psycopg3 serves both modes.
_SYNC_DRIVERS: tuple[tuple[str, str], ...] = (
    ("sqlite+aiosqlite://", "sqlite://"),
    ("postgres://", "postgresql+psycopg://"),
    ("postgresql://", "postgresql+psycopg://"),
    ("postgresql+psycopg2://", "postgresql+psycopg://"),
)


def _swap_scheme(database_url: str, drivers: tuple[tuple[str, str], ...]) -> str:
    url = (database_url or "").strip()
    for old, new in drivers:
        if url.startswith(old):
            return new + url[len(old) :]
    return url


def normalize_database_url_for_async(database_url: str) -> str:
    return _swap_scheme(database_url, _ASYNC_DRIVERS)


def normalize_database_url_for_alembic(database_url: str) -> str:
    return _swap_scheme(database_url, _SYNC_DRIVERS)


def sqlite_file_path(database_url: str) -> Path | None:
    """Database file behind a SQLite URL; None for in-memory or other backends."""

    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return None
    if not url.database or url.database == ":memory:":
        return None
    return Path(url.database)


def ensure_sqlite_parent_dir(database_url: str) -> None:
    # A fresh checkout points at ./dev.db; deploys may point at a data/ subdir.
    path = sqlite_file_path(database_url)
    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)
