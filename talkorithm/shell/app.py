"""MentorShell — UI state and the request/response cycle of a tutoring turn.

The shell owns what a front end renders (messages, memories, the input box,
loading/listening/speaking flags, the last error) and the actions a front end
triggers. Collaborators are injected so any of them can be swapped out.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

from talkorithm.config import settings
from talkorithm.errors import SpeechError
from talkorithm.mentor.prompt import build_mentor_prompt, memory_from_text, summarize_memories
from talkorithm.relay.client import send_mentor_chat
from talkorithm.speech.bridge import SpeechBridge
from talkorithm.store.models import Message, MessageFields, now_ms

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from talkorithm.board.whiteboard import Whiteboard
    from talkorithm.shell.auth import Account, AuthProvider
    from talkorithm.store.chat_store import ChatStore
    from talkorithm.store.models import MemoryItem

    SendChat = Callable[..., Awaitable[str]]

logger = logging.getLogger(__name__)

SEND_FAILED = "Unable to reach the mentor right now."
SPEECH_UNAVAILABLE = "Speech recognition is unavailable on this device."
VOICE_CHECK = "Voice ready."
PENDING_ID = "pending"


class MentorShell:
    """Composes auth, store, relay, speech, and sketchpad into one session."""

    def __init__(
        self,
        *,
        auth: AuthProvider,
        store: ChatStore,
        send_chat: SendChat = send_mentor_chat,
        speech: SpeechBridge | None = None,
        board: Whiteboard | None = None,
        thread_id: str | None = None,
        system_prompt: str | None = None,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._auth = auth
        self._store = store
        self._send_chat = send_chat
        self._speech = speech or SpeechBridge()
        self.board = board
        self.thread_id = thread_id or settings.thread_id
        self.system_prompt = system_prompt or build_mentor_prompt()
        self.on_change = on_change

        # Rendered state
        self.user: Account | None = None
        self.messages: list[Message] = []
        self.memories: list[MemoryItem] = []
        self.input = ""
        self.loading = False
        self.listening = False
        self.speaking = False
        self.auto_speak = settings.auto_speak
        self.auto_send_voice = settings.auto_send_voice
        self.user_gesture = False
        self.error: str | None = None

        self._watchers: list[asyncio.Task] = []
        self._retired: list[asyncio.Task] = []
        self._unsubscribe_auth: Callable[[], None] | None = None

    # -- Lifecycle -------------------------------------------------------------

    def start(self) -> None:
        """Begin following auth state. Must be called inside a running loop."""
        if self._unsubscribe_auth is None:
            self._unsubscribe_auth = self._auth.subscribe(self._on_auth_change)

    async def close(self) -> None:
        """Stop following auth and release the store subscriptions."""
        if self._unsubscribe_auth is not None:
            self._unsubscribe_auth()
            self._unsubscribe_auth = None
        await self._stop_watchers()

    def _emit(self) -> None:
        if self.on_change is not None:
            self.on_change()

    def _on_auth_change(self, user: Account | None) -> None:
        for task in self._watchers:
            task.cancel()
        self._retired.extend(self._watchers)
        self._watchers = []
        self.user = user

        if user is None:
            self.messages = []
            self.memories = []
            self._emit()
            return

        self._watchers = [
            asyncio.create_task(self._watch_messages(user.uid)),
            asyncio.create_task(self._watch_memories(user.uid)),
        ]
        self._emit()

    async def _stop_watchers(self) -> None:
        watchers = [*self._retired, *self._watchers]
        self._retired, self._watchers = [], []
        for task in watchers:
            task.cancel()
        for task in watchers:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _watch_messages(self, uid: str) -> None:
        try:
            async with self._store.subscribe_messages(uid, self.thread_id) as snapshots:
                async for messages in snapshots:
                    self.messages = messages
                    self._emit()
        except Exception:
            logger.exception("Message subscription failed (uid=%s)", uid)

    async def _watch_memories(self, uid: str) -> None:
        try:
            async with self._store.subscribe_memories(uid) as snapshots:
                async for memories in snapshots:
                    self.memories = memories
                    self._emit()
        except Exception:
            logger.exception("Memory subscription failed (uid=%s)", uid)

    # -- Derived state ---------------------------------------------------------

    @property
    def memory_summary(self) -> str:
        return summarize_memories(self.memories)

    def note_gesture(self) -> None:
        """Record that the user has interacted, which unlocks auto-speak."""
        self.user_gesture = True

    # -- Auth ------------------------------------------------------------------

    async def sign_in(self) -> None:
        self.error = None
        await self._auth.sign_in()

    async def sign_out(self) -> None:
        self.error = None
        await self._auth.sign_out()

    # -- Sending ---------------------------------------------------------------

    async def send_text(self, text: str, *, from_voice: bool = False) -> None:
        """Persist the user's turn, ask the mentor, persist the reply.

        Ignored when signed out, when *text* is blank, or while a reply is
        already loading.
        """
        user = self.user
        if user is None or not text.strip() or self.loading:
            return

        self.error = None
        content = text.strip()
        now = now_ms()
        history = list(self.messages)

        await self._store.add_message(
            user.uid,
            self.thread_id,
            MessageFields(role="user", content=content, created_at=now),
        )

        if not from_voice:
            self.input = ""

        self.loading = True
        self._emit()
        try:
            drawing = self.board.snapshot() if self.board is not None else None
            pending = Message(id=PENDING_ID, role="user", content=content, created_at=now)
            reply = await self._send_chat(
                [*history, pending],
                system=self.system_prompt,
                memory=self.memory_summary,
                image_data_url=drawing,
            )

            await self._store.add_message(
                user.uid,
                self.thread_id,
                MessageFields(role="assistant", content=reply),
            )

            if self.auto_speak and self.user_gesture:
                await self._speak(reply)
        except Exception:
            logger.exception("Mentor turn failed")
            self.error = SEND_FAILED
        finally:
            self.loading = False
            self._emit()

    async def send(self) -> None:
        """Send whatever is in the input box."""
        if not self.input.strip():
            return
        await self.send_text(self.input)

    async def speak_input(self) -> None:
        """Capture one spoken utterance and send it (or append it to input)."""
        if self.listening:
            return

        self.error = None
        self.listening = True
        self._emit()
        try:
            transcript = await self._speech.start_recognition()
            if self.auto_send_voice:
                await self.send_text(transcript, from_voice=True)
            else:
                self.input = f"{self.input} {transcript}" if self.input else transcript
        except SpeechError:
            self.error = SPEECH_UNAVAILABLE
        finally:
            self.listening = False
            self._emit()

    # -- Memory ----------------------------------------------------------------

    async def save_memory(self, message: Message) -> None:
        """Save an excerpt of *message* as a long-term memory note."""
        if self.user is None:
            return
        await self._store.add_memory(self.user.uid, memory_from_text(message.content))

    # -- Voice -----------------------------------------------------------------

    def _finish_speaking(self) -> None:
        if self.speaking:
            self.speaking = False
            self._emit()

    async def _speak(self, text: str) -> None:
        if self.speaking:
            self._speech.stop()
        self.speaking = True
        self._emit()
        try:
            await self._speech.speak(text, on_finish=self._finish_speaking)
        finally:
            self._finish_speaking()

    async def speak_message(self, message: Message) -> None:
        """Read a message aloud."""
        await self._speak(message.content)

    def stop_voice(self) -> None:
        self._speech.stop()

    async def test_voice(self) -> None:
        await self._speech.speak(VOICE_CHECK)
