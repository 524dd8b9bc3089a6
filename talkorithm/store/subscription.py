"""Snapshot streams for realtime store subscriptions."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")


class Subscription(Generic[T]):
    """Async iterator yielding the current query result after every change.

    The first snapshot is available immediately. Change notifications that
    arrive while the consumer is busy are coalesced, so the consumer always
    sees the latest state rather than every intermediate one.
    """

    def __init__(self, fetch: Callable[[], Awaitable[list[T]]]) -> None:
        self._fetch = fetch
        self._changed = asyncio.Event()
        self._changed.set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def notify(self) -> None:
        """Mark the underlying collection as changed."""
        self._changed.set()

    def close(self) -> None:
        """End the stream; a pending ``__anext__`` returns promptly."""
        self._closed = True
        self._changed.set()

    def __aiter__(self) -> Subscription[T]:
        return self

    async def __anext__(self) -> list[T]:
        await self._changed.wait()
        if self._closed:
            raise StopAsyncIteration
        self._changed.clear()
        return await self._fetch()
