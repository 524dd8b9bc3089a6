"""Translate a relay request into a Gemini ``generateContent`` body."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from talkorithm.relay.models import ChatTurn, RelayRequest

MEMORY_HEADER = "Long-term memory:"
IMAGE_MIME_TYPE = "image/png"

# Static tuning for the mentor persona
GENERATION_CONFIG: dict[str, Any] = {
    "temperature": 0.4,
    "topP": 0.9,
    "maxOutputTokens": 800,
}

UPSTREAM_ROLES = {"assistant": "model", "user": "user"}


def build_system_instruction(system: str, memory: str) -> str:
    """Join the caller's system prompt with the long-term memory block."""
    return f"{system}\n\n{MEMORY_HEADER}\n{memory}"


def image_payload(data_url: str | None) -> str | None:
    """Return the base64 portion of a data-URL (text after the first comma).

    ``None`` when no URL was given or the URL carries no payload.
    """
    if not data_url:
        return None
    _, sep, data = data_url.partition(",")
    if not sep or not data:
        return None
    # Only the segment up to a second comma, matching split(",")[1]
    return data.split(",", 1)[0] or None


def build_contents(
    messages: list[ChatTurn], image_data_url: str | None = None
) -> list[dict[str, Any]]:
    """Map chat turns to Gemini ``contents``.

    The inline image is attached to the final turn only, and only when that
    turn is from the user.
    """
    image = image_payload(image_data_url)
    contents: list[dict[str, Any]] = []
    last = len(messages) - 1

    for index, message in enumerate(messages):
        parts: list[dict[str, Any]] = [{"text": message.content}]
        if index == last and message.role == "user" and image:
            parts.append({"inlineData": {"mimeType": IMAGE_MIME_TYPE, "data": image}})
        contents.append({"role": UPSTREAM_ROLES[message.role], "parts": parts})

    return contents


def build_generate_request(request: RelayRequest) -> dict[str, Any]:
    """Assemble the full upstream request body."""
    return {
        "systemInstruction": {
            "parts": [{"text": build_system_instruction(request.system, request.memory)}]
        },
        "contents": build_contents(request.messages, request.image_data_url),
        "generationConfig": dict(GENERATION_CONFIG),
    }
