"""SpeechEngine protocols — the platform speech APIs the bridge wraps."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass(frozen=True)
class Voice:
    """A synthesis voice offered by the platform."""

    name: str
    lang: str  # BCP 47 tag, e.g. "en-US"


@dataclass
class Utterance:
    """One request to speak text aloud."""

    text: str
    voice: Voice | None = None
    rate: float = 1.0
    pitch: float = 1.0


@runtime_checkable
class Recognizer(Protocol):
    """Protocol for speech-to-text engines."""

    async def recognize_once(
        self, *, language: str, interim_results: bool, max_alternatives: int
    ) -> str:
        """Listen for one utterance and return its final transcript.

        Raises any exception when the engine reports an error.
        """
        ...


@runtime_checkable
class Synthesizer(Protocol):
    """Protocol for text-to-speech engines."""

    def get_voices(self) -> list[Voice]:
        """Voices available right now; may be empty until the list loads."""
        ...

    def add_voices_changed_listener(self, listener: Callable[[], None]) -> None:
        """Call *listener* whenever the voice list changes."""
        ...

    def remove_voices_changed_listener(self, listener: Callable[[], None]) -> None:
        ...

    async def speak(self, utterance: Utterance) -> None:
        """Play *utterance*; returns when playback ends or is cancelled."""
        ...

    def cancel(self) -> None:
        """Stop any utterance in progress."""
        ...
