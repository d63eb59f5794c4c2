from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool
from sqlmodel import SQLModel

from focusflow_backend import models  # noqa: F401  # registers users/notes/tasks/habits
from focusflow_backend.config import settings
from focusflow_backend.db_urls import ensure_sqlite_parent_dir, normalize_database_url_for_alembic


if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)


def _database_url() -> str:
    # Same source as the app: DATABASE_URL env / .env via Settings.
    return normalize_database_url_for_alembic(settings.database_url)


def _configure(**kwargs: object) -> None:
    context.configure(target_metadata=SQLModel.metadata, compare_type=True, **kwargs)
    with context.begin_transaction():
        context.run_migrations()


def main() -> None:
    url = _database_url()
    if context.is_offline_mode():
        _configure(url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
        return

    ensure_sqlite_parent_dir(url)
    engine = create_engine(url, poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            # SQLite cannot ALTER most columns in place; batch mode rebuilds tables.
            _configure(
                connection=connection,
                render_as_batch=connection.dialect.name == "sqlite",
            )
    finally:
        engine.dispose()


main()
