from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from focusflow_backend.config import settings
from focusflow_backend.db import dispose_engine_cache, get_engine, init_db, reset_engine_cache


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
async def _dispose_engine_cache_per_test(  # pyright: ignore[reportUnusedFunction]
    anyio_backend: object,  # noqa: ARG001
) -> AsyncGenerator[None, None]:
    _ = anyio_backend
    yield

    # Dispose on the async side while the per-test event loop is still alive,
    # otherwise aiosqlite worker threads can outlive it.
    if get_engine.cache_info().currsize:
        await get_engine().dispose()
    dispose_engine_cache()


@pytest.fixture
async def sqlite_db(tmp_path: Path) -> AsyncGenerator[str, None]:
    """Point the app at a fresh per-test SQLite file with the schema created."""

    old_db = settings.database_url
    settings.database_url = f"sqlite:///{tmp_path / 'focusflow-test.db'}"
    reset_engine_cache()
    await init_db()
    try:
        yield settings.database_url
    finally:
        settings.database_url = old_db


def pytest_sessionfinish(session: object, exitstatus: int) -> None:  # noqa: ARG001
    # Safety net so CI can exit cleanly.
    _ = session, exitstatus
    dispose_engine_cache()
