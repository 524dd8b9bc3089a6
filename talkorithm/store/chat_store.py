"""ChatStore — append-only messages and memories via libsql.

Messages live per account and thread; memories live per account. Writes
notify every open subscription on the same collection, which re-reads and
yields a fresh ordered snapshot.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from talkorithm.config import settings
from talkorithm.db import connection
from talkorithm.store.models import (
    MemoryFields,
    MemoryItem,
    Message,
    MessageFields,
    new_id,
)
from talkorithm.store.subscription import Subscription

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from contextlib import AbstractAsyncContextManager
    from pathlib import Path

    from talkorithm.db import AsyncConnection

logger = logging.getLogger(__name__)

_CREATE_MESSAGES = """
CREATE TABLE IF NOT EXISTS messages (
    id         TEXT PRIMARY KEY,
    account_id TEXT NOT NULL,
    thread_id  TEXT NOT NULL,
    role       TEXT NOT NULL,
    content    TEXT NOT NULL,
    created_at INTEGER NOT NULL
)
"""

_CREATE_MESSAGES_INDEX = """
CREATE INDEX IF NOT EXISTS idx_messages_thread
    ON messages (account_id, thread_id, created_at)
"""

_CREATE_MEMORIES = """
CREATE TABLE IF NOT EXISTS memories (
    id         TEXT PRIMARY KEY,
    account_id TEXT NOT NULL,
    title      TEXT NOT NULL,
    detail     TEXT NOT NULL,
    created_at INTEGER NOT NULL
)
"""

_CREATE_MEMORIES_INDEX = """
CREATE INDEX IF NOT EXISTS idx_memories_account
    ON memories (account_id, created_at)
"""

_SCHEMA = (
    _CREATE_MESSAGES,
    _CREATE_MESSAGES_INDEX,
    _CREATE_MEMORIES,
    _CREATE_MEMORIES_INDEX,
)

_CollectionKey = tuple[str, ...]


def _messages_key(account_id: str, thread_id: str) -> _CollectionKey:
    return ("messages", account_id, thread_id)


def _memories_key(account_id: str) -> _CollectionKey:
    return ("memories", account_id)


class ChatStore:
    """Persists conversation turns and memory notes in SQLite / Turso.

    Pass an explicit *db_path* for test isolation
    (e.g. ``tmp_path / "test.db"``).
    """

    def __init__(
        self,
        db_path: Path | None = None,
        *,
        message_limit: int | None = None,
        memory_limit: int | None = None,
    ) -> None:
        self._db_path = db_path
        self._initialised = False
        self.message_limit = (
            settings.message_window_size if message_limit is None else message_limit
        )
        self.memory_limit = settings.memory_window_size if memory_limit is None else memory_limit
        self._subscribers: dict[_CollectionKey, set[Subscription]] = defaultdict(set)

    # -- Internal helpers ------------------------------------------------------

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[AsyncConnection]:
        async with connection(self._db_path) as db:
            if not self._initialised:
                await db.apply_schema(_SCHEMA)
                self._initialised = True
            yield db

    def _notify(self, key: _CollectionKey) -> None:
        for sub in list(self._subscribers.get(key, ())):
            sub.notify()

    @asynccontextmanager
    async def _subscribe(self, key: _CollectionKey, fetch) -> AsyncIterator[Subscription]:  # noqa: ANN001
        sub: Subscription = Subscription(fetch)
        self._subscribers[key].add(sub)
        logger.debug("Subscribed to %s", "/".join(key))
        try:
            yield sub
        finally:
            sub.close()
            self._subscribers[key].discard(sub)
            if not self._subscribers[key]:
                del self._subscribers[key]
            logger.debug("Unsubscribed from %s", "/".join(key))

    # -- Messages --------------------------------------------------------------

    async def add_message(
        self, account_id: str, thread_id: str, message: MessageFields
    ) -> Message:
        """Append a message to a thread. The store assigns its ID."""
        stored = Message(id=new_id(), **message.model_dump())
        async with self._connect() as db:
            await db.execute(
                """
                INSERT INTO messages
                    (id, account_id, thread_id, role, content, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    stored.id,
                    account_id,
                    thread_id,
                    stored.role,
                    stored.content,
                    stored.created_at,
                ),
            )
            await db.commit()

        logger.info("Stored %s message %s (thread=%s)", stored.role, stored.id, thread_id)
        self._notify(_messages_key(account_id, thread_id))
        return stored

    async def list_messages(self, account_id: str, thread_id: str) -> list[Message]:
        """Oldest-first messages of a thread, capped at ``message_limit``."""
        async with self._connect() as db:
            rows = await db.fetch_all(
                """
                SELECT id, role, content, created_at FROM messages
                WHERE account_id = ? AND thread_id = ?
                ORDER BY created_at ASC, rowid ASC
                LIMIT ?
                """,
                (account_id, thread_id, self.message_limit),
            )
        return [
            Message(id=row[0], role=row[1], content=row[2], created_at=row[3])
            for row in rows
        ]

    def subscribe_messages(
        self, account_id: str, thread_id: str
    ) -> AbstractAsyncContextManager[Subscription[Message]]:
        """Stream ordered message snapshots until the ``async with`` exits.

        Usage::

            async with store.subscribe_messages(uid, "main") as snapshots:
                async for messages in snapshots:
                    ...
        """
        return self._subscribe(
            _messages_key(account_id, thread_id),
            lambda: self.list_messages(account_id, thread_id),
        )

    # -- Memories --------------------------------------------------------------

    async def add_memory(self, account_id: str, memory: MemoryFields) -> MemoryItem:
        """Append a memory note to an account. The store assigns its ID."""
        stored = MemoryItem(id=new_id(), **memory.model_dump())
        async with self._connect() as db:
            await db.execute(
                """
                INSERT INTO memories (id, account_id, title, detail, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (stored.id, account_id, stored.title, stored.detail, stored.created_at),
            )
            await db.commit()

        logger.info("Stored memory %s: %s", stored.id, stored.title[:40])
        self._notify(_memories_key(account_id))
        return stored

    async def list_memories(self, account_id: str) -> list[MemoryItem]:
        """Newest-first memory notes, capped at ``memory_limit``."""
        async with self._connect() as db:
            rows = await db.fetch_all(
                """
                SELECT id, title, detail, created_at FROM memories
                WHERE account_id = ?
                ORDER BY created_at DESC, rowid DESC
                LIMIT ?
                """,
                (account_id, self.memory_limit),
            )
        return [
            MemoryItem(id=row[0], title=row[1], detail=row[2], created_at=row[3])
            for row in rows
        ]

    def subscribe_memories(
        self, account_id: str
    ) -> AbstractAsyncContextManager[Subscription[MemoryItem]]:
        """Stream newest-first memory snapshots until the ``async with`` exits."""
        return self._subscribe(
            _memories_key(account_id),
            lambda: self.list_memories(account_id),
        )
