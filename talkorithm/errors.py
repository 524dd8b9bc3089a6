"""Exception hierarchy shared across the relay, client, and shell."""


class TalkorithmError(Exception):
    """Base class for all application errors."""


class ConfigurationError(TalkorithmError):
    """A required credential or endpoint is missing."""


class RelayNotConfiguredError(ConfigurationError):
    """RELAY_URL is not set, so chat turns have nowhere to go."""

    def __init__(self) -> None:
        super().__init__("Missing RELAY_URL")


class RelayError(TalkorithmError):
    """The relay answered with a non-success status."""

    def __init__(self, status: int, body: str = "") -> None:
        self.status = status
        self.body = body
        super().__init__(f"Relay error: {status}")


class SpeechError(TalkorithmError):
    """Base class for speech bridge failures."""


class SpeechUnavailableError(SpeechError):
    """No speech engine is available on this device."""

    def __init__(self) -> None:
        super().__init__("Speech recognition unavailable")


class SpeechRecognitionError(SpeechError):
    """The recognizer reported an error instead of a transcript."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("Speech recognition error")
