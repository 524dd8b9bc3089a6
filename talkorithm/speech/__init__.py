"""Speech bridge — platform speech recognition and synthesis."""

from talkorithm.speech.bridge import SpeechBridge, pick_voice
from talkorithm.speech.engines import Recognizer, Synthesizer, Utterance, Voice

__all__ = [
    "Recognizer",
    "SpeechBridge",
    "Synthesizer",
    "Utterance",
    "Voice",
    "pick_voice",
]
