"""Tests for the message and memory store."""

import asyncio
import contextlib

from talkorithm.store.chat_store import ChatStore
from talkorithm.store.models import MemoryFields, MessageFields


def _msg(role: str, content: str, created_at: int) -> MessageFields:
    return MessageFields(role=role, content=content, created_at=created_at)


def _mem(title: str, created_at: int) -> MemoryFields:
    return MemoryFields(title=title, detail=f"{title} detail", created_at=created_at)


# -- Messages ------------------------------------------------------------------


async def test_add_message_assigns_id(chat_store: ChatStore) -> None:
    stored = await chat_store.add_message("u1", "main", _msg("user", "hi", 10))

    assert stored.id
    assert stored.role == "user"
    assert stored.content == "hi"
    assert stored.created_at == 10


async def test_messages_listed_oldest_first(chat_store: ChatStore) -> None:
    await chat_store.add_message("u1", "main", _msg("assistant", "second", 20))
    await chat_store.add_message("u1", "main", _msg("user", "first", 10))
    await chat_store.add_message("u1", "main", _msg("user", "third", 30))

    messages = await chat_store.list_messages("u1", "main")
    assert [m.content for m in messages] == ["first", "second", "third"]


async def test_messages_with_equal_timestamps_keep_insert_order(chat_store: ChatStore) -> None:
    await chat_store.add_message("u1", "main", _msg("user", "a", 5))
    await chat_store.add_message("u1", "main", _msg("assistant", "b", 5))

    messages = await chat_store.list_messages("u1", "main")
    assert [m.content for m in messages] == ["a", "b"]


async def test_messages_scoped_by_account_and_thread(chat_store: ChatStore) -> None:
    await chat_store.add_message("u1", "main", _msg("user", "mine", 1))
    await chat_store.add_message("u2", "main", _msg("user", "theirs", 1))
    await chat_store.add_message("u1", "other", _msg("user", "elsewhere", 1))

    messages = await chat_store.list_messages("u1", "main")
    assert [m.content for m in messages] == ["mine"]


async def test_message_limit_keeps_oldest(tmp_path, _no_turso) -> None:
    store = ChatStore(db_path=tmp_path / "limit.db", message_limit=2)
    for i in range(3):
        await store.add_message("u1", "main", _msg("user", f"m{i}", i))

    messages = await store.list_messages("u1", "main")
    assert [m.content for m in messages] == ["m0", "m1"]


async def test_messages_persist_across_instances(tmp_path, _no_turso) -> None:
    db_path = tmp_path / "persist.db"
    await ChatStore(db_path=db_path).add_message("u1", "main", _msg("user", "kept", 1))

    messages = await ChatStore(db_path=db_path).list_messages("u1", "main")
    assert [m.content for m in messages] == ["kept"]


# -- Memories ------------------------------------------------------------------


async def test_memories_listed_newest_first(chat_store: ChatStore) -> None:
    await chat_store.add_memory("u1", _mem("old", 1))
    await chat_store.add_memory("u1", _mem("new", 3))
    await chat_store.add_memory("u1", _mem("mid", 2))

    memories = await chat_store.list_memories("u1")
    assert [m.title for m in memories] == ["new", "mid", "old"]
    assert memories[0].detail == "new detail"


async def test_memory_limit_keeps_newest(tmp_path, _no_turso) -> None:
    store = ChatStore(db_path=tmp_path / "limit.db", memory_limit=2)
    for i in range(4):
        await store.add_memory("u1", _mem(f"t{i}", i))

    memories = await store.list_memories("u1")
    assert [m.title for m in memories] == ["t3", "t2"]


async def test_memories_scoped_by_account(chat_store: ChatStore) -> None:
    await chat_store.add_memory("u1", _mem("mine", 1))
    await chat_store.add_memory("u2", _mem("theirs", 1))

    assert [m.title for m in await chat_store.list_memories("u1")] == ["mine"]


# -- Subscriptions -------------------------------------------------------------


async def test_message_subscription_yields_initial_then_updates(chat_store: ChatStore) -> None:
    await chat_store.add_message("u1", "main", _msg("user", "before", 1))

    async with chat_store.subscribe_messages("u1", "main") as snapshots:
        first = await asyncio.wait_for(anext(snapshots), timeout=5)
        assert [m.content for m in first] == ["before"]

        await chat_store.add_message("u1", "main", _msg("assistant", "after", 2))
        second = await asyncio.wait_for(anext(snapshots), timeout=5)
        assert [m.content for m in second] == ["before", "after"]


async def test_subscription_ignores_other_threads(chat_store: ChatStore) -> None:
    async with chat_store.subscribe_messages("u1", "main") as snapshots:
        assert await asyncio.wait_for(anext(snapshots), timeout=5) == []

        await chat_store.add_message("u1", "other", _msg("user", "x", 1))
        pending = asyncio.ensure_future(anext(snapshots))
        await asyncio.sleep(0.05)
        assert not pending.done()
        pending.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await pending


async def test_subscription_coalesces_bursts(chat_store: ChatStore) -> None:
    async with chat_store.subscribe_messages("u1", "main") as snapshots:
        await asyncio.wait_for(anext(snapshots), timeout=5)

        for i in range(3):
            await chat_store.add_message("u1", "main", _msg("user", f"m{i}", i))

        latest = await asyncio.wait_for(anext(snapshots), timeout=5)
        assert [m.content for m in latest] == ["m0", "m1", "m2"]


async def test_memory_subscription_yields_updates(chat_store: ChatStore) -> None:
    async with chat_store.subscribe_memories("u1") as snapshots:
        assert await asyncio.wait_for(anext(snapshots), timeout=5) == []

        await chat_store.add_memory("u1", _mem("invariant", 1))
        updated = await asyncio.wait_for(anext(snapshots), timeout=5)
        assert [m.title for m in updated] == ["invariant"]


async def test_unsubscribe_ends_stream(chat_store: ChatStore) -> None:
    received: list[list] = []

    async def consume() -> None:
        async with chat_store.subscribe_messages("u1", "main") as snapshots:
            async for messages in snapshots:
                received.append(messages)
                if len(received) == 1:
                    snapshots.close()

    await asyncio.wait_for(consume(), timeout=5)
    assert received == [[]]
    assert not chat_store._subscribers

    # Writes after release reach no one
    await chat_store.add_message("u1", "main", _msg("user", "late", 1))
    assert received == [[]]


async def test_zero_limits_are_respected(tmp_path, _no_turso) -> None:
    store = ChatStore(db_path=tmp_path / "zero.db", message_limit=0, memory_limit=0)
    await store.add_message("u1", "main", _msg("user", "hidden", 1))
    await store.add_memory("u1", _mem("hidden", 1))

    assert store.message_limit == 0
    assert await store.list_messages("u1", "main") == []
    assert await store.list_memories("u1") == []


def test_limits_default_to_settings(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr("talkorithm.config.settings.message_window_size", 7)
    monkeypatch.setattr("talkorithm.config.settings.memory_window_size", 5)
    store = ChatStore(db_path=tmp_path / "defaults.db")
    assert (store.message_limit, store.memory_limit) == (7, 5)
