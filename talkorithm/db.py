"""libsql access for the chat store.

The ``libsql`` driver is synchronous, so every call is pushed onto a worker
thread with ``asyncio.to_thread()``. Where the data lives depends on settings:

- ``TURSO_DATABASE_URL`` set → hosted Turso database (``TURSO_AUTH_TOKEN``)
- otherwise → local file at ``database_path``

Tests pass an explicit path, which always wins.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import libsql

from talkorithm.config import settings

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable
    from pathlib import Path

logger = logging.getLogger(__name__)

BUSY_TIMEOUT_MS = 5000


class AsyncCursor:
    """Result rows of one statement."""

    def __init__(self, cursor: Any) -> None:
        self._cursor = cursor

    async def fetchone(self) -> tuple | None:
        return await asyncio.to_thread(self._cursor.fetchone)

    async def fetchall(self) -> list[tuple]:
        return await asyncio.to_thread(self._cursor.fetchall)


class AsyncConnection:
    """A libsql connection driven from the event loop."""

    def __init__(self, conn: Any) -> None:
        self._conn = conn

    async def execute(self, sql: str, params: tuple = ()) -> AsyncCursor:
        cursor = await asyncio.to_thread(self._conn.execute, sql, params)
        return AsyncCursor(cursor)

    async def fetch_all(self, sql: str, params: tuple = ()) -> list[tuple]:
        """Run a query and return every row."""
        cursor = await self.execute(sql, params)
        return await cursor.fetchall()

    async def apply_schema(self, statements: Iterable[str]) -> None:
        """Run idempotent DDL statements and commit once."""
        for ddl in statements:
            await self.execute(ddl)
        await self.commit()

    async def commit(self) -> None:
        await asyncio.to_thread(self._conn.commit)

    async def close(self) -> None:
        await asyncio.to_thread(self._conn.close)


def _open_file(path: Path) -> Any:
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = libsql.connect(str(path))
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(f"PRAGMA busy_timeout={BUSY_TIMEOUT_MS}")
    return conn


def _open_hosted() -> Any:
    return libsql.connect(
        database=settings.turso_database_url,
        auth_token=settings.turso_auth_token,
    )


async def get_connection(local_path_override: Path | None = None) -> AsyncConnection:
    """Open a connection; the caller closes it."""
    if local_path_override is not None:
        conn = await asyncio.to_thread(_open_file, local_path_override)
    elif settings.turso_database_url:
        logger.debug("Connecting to Turso at %s", settings.turso_database_url)
        conn = await asyncio.to_thread(_open_hosted)
    else:
        conn = await asyncio.to_thread(_open_file, settings.database_path)
    return AsyncConnection(conn)


@asynccontextmanager
async def connection(local_path_override: Path | None = None) -> AsyncIterator[AsyncConnection]:
    """``async with`` form of :func:`get_connection` that always closes."""
    db = await get_connection(local_path_override)
    try:
        yield db
    finally:
        await db.close()
