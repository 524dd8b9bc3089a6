"""Wire models for the chat relay: the inbound turn and the Gemini reply."""

from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

Role = Literal["user", "assistant"]


class ChatTurn(BaseModel):
    """One message as sent over the wire to the relay."""

    role: Role
    content: str


class RelayRequest(BaseModel):
    """Body of ``POST`` to the relay.

    ``imageDataUrl`` keeps its camelCase name on the wire; Python code uses
    ``image_data_url``.
    """

    model_config = ConfigDict(populate_by_name=True)

    system: str
    memory: str
    image_data_url: str | None = Field(default=None, alias="imageDataUrl")
    messages: list[ChatTurn]

    def to_wire(self) -> dict[str, Any]:
        """Serialize with wire field names, omitting an absent image."""
        return self.model_dump(by_alias=True, exclude_none=True)


class RelayResponse(BaseModel):
    """Body of a successful relay reply."""

    text: str = ""


# -- Gemini generateContent response -----------------------------------------


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="ignore")


class GeminiPart(_Lenient):
    text: str | None = None


class GeminiContent(_Lenient):
    parts: list[GeminiPart] | None = None


class GeminiCandidate(_Lenient):
    content: GeminiContent | None = None


class GenerateContentResponse(_Lenient):
    """The subset of a Gemini reply the relay reads."""

    candidates: list[GeminiCandidate] | None = None

    @classmethod
    def parse(cls, data: Any) -> GenerateContentResponse:
        """Validate *data*, falling back to an empty response on any mismatch."""
        if not isinstance(data, dict):
            return cls()
        try:
            return cls.model_validate(data)
        except ValidationError:
            logger.warning("Unexpected Gemini response shape; treating as empty")
            return cls()

    def text(self) -> str:
        """Concatenate every text part of the first candidate, in order."""
        if not self.candidates:
            return ""
        content = self.candidates[0].content
        if content is None or content.parts is None:
            return ""
        return "".join(part.text or "" for part in content.parts)
