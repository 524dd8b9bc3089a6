"""Speech bridge — one-shot recognition and spoken replies."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from talkorithm.config import settings
from talkorithm.errors import SpeechRecognitionError, SpeechUnavailableError
from talkorithm.speech.engines import Utterance, Voice

if TYPE_CHECKING:
    from collections.abc import Callable

    from talkorithm.speech.engines import Recognizer, Synthesizer

logger = logging.getLogger(__name__)


def pick_voice(voices: list[Voice]) -> Voice | None:
    """First English voice, or None to let the platform choose."""
    return next((voice for voice in voices if voice.lang.startswith("en")), None)


class SpeechBridge:
    """Wraps the platform recognizer and synthesizer.

    Either engine may be absent: recognition then raises
    ``SpeechUnavailableError`` and speaking becomes a no-op.
    """

    def __init__(
        self,
        recognizer: Recognizer | None = None,
        synthesizer: Synthesizer | None = None,
        language: str | None = None,
    ) -> None:
        self._recognizer = recognizer
        self._synthesizer = synthesizer
        self.language = language or settings.speech_language

    @property
    def can_listen(self) -> bool:
        return self._recognizer is not None

    @property
    def can_speak(self) -> bool:
        return self._synthesizer is not None

    # -- Recognition -----------------------------------------------------------

    async def start_recognition(self) -> str:
        """Listen for a single utterance and return its transcript.

        Raises:
            SpeechUnavailableError: No recognizer on this device.
            SpeechRecognitionError: The recognizer reported an error.
        """
        if self._recognizer is None:
            raise SpeechUnavailableError

        try:
            transcript = await self._recognizer.recognize_once(
                language=self.language,
                interim_results=False,
                max_alternatives=1,
            )
        except Exception as exc:
            logger.warning("Speech recognition failed: %s", exc)
            raise SpeechRecognitionError(str(exc)) from exc

        logger.debug("Recognized %d chars", len(transcript))
        return transcript

    # -- Synthesis -------------------------------------------------------------

    async def _voices(self) -> list[Voice]:
        """Return the voice list, waiting for it to load if it is empty."""
        synth = self._synthesizer
        voices = synth.get_voices()
        if voices:
            return voices

        loop = asyncio.get_running_loop()
        ready: asyncio.Future[list[Voice]] = loop.create_future()

        def on_change() -> None:
            next_voices = synth.get_voices()
            if next_voices and not ready.done():
                synth.remove_voices_changed_listener(on_change)
                ready.set_result(next_voices)

        synth.add_voices_changed_listener(on_change)
        return await ready

    async def speak(self, text: str, on_finish: Callable[[], None] | None = None) -> None:
        """Speak *text*, returning once playback ends.

        Any utterance already playing is cancelled first. *on_finish* runs
        when playback ends.
        """
        synth = self._synthesizer
        if synth is None:
            return

        voices = await self._voices()
        utterance = Utterance(text=text, voice=pick_voice(voices))
        synth.cancel()
        logger.debug(
            "Speaking %d chars (voice=%s)",
            len(text),
            utterance.voice.name if utterance.voice else "default",
        )
        await synth.speak(utterance)
        if on_finish is not None:
            on_finish()

    def stop(self) -> None:
        """Cancel any utterance in progress. Safe to call repeatedly."""
        if self._synthesizer is not None:
            self._synthesizer.cancel()
