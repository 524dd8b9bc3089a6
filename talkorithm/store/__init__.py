"""Persistence client — conversation history and long-term memory."""

from talkorithm.store.chat_store import ChatStore
from talkorithm.store.models import MemoryFields, MemoryItem, Message, MessageFields
from talkorithm.store.subscription import Subscription

__all__ = [
    "ChatStore",
    "MemoryFields",
    "MemoryItem",
    "Message",
    "MessageFields",
    "Subscription",
]
