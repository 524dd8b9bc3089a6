"""Data models for conversation history and long-term memory."""

import time
import uuid
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "assistant"]


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def new_id() -> str:
    """Generate a store-assigned document ID."""
    return uuid.uuid4().hex


class MessageFields(BaseModel):
    """A conversation turn before the store has assigned it an ID."""

    role: Role
    content: str
    created_at: int = Field(default_factory=now_ms)


class Message(MessageFields):
    """A stored conversation turn. Immutable once written."""

    model_config = ConfigDict(frozen=True)

    id: str


class MemoryFields(BaseModel):
    """A long-term memory note before the store has assigned it an ID."""

    title: str
    detail: str
    created_at: int = Field(default_factory=now_ms)


class MemoryItem(MemoryFields):
    """A stored long-term memory note."""

    model_config = ConfigDict(frozen=True)

    id: str
