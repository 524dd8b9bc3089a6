"""Chat relay client — shapes a mentor turn and forwards it to the relay."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from talkorithm.config import settings
from talkorithm.errors import RelayError, RelayNotConfiguredError
from talkorithm.relay.models import ChatTurn, RelayRequest, RelayResponse

if TYPE_CHECKING:
    from talkorithm.store.models import Message

logger = logging.getLogger(__name__)


def build_relay_request(
    messages: list[Message],
    *,
    system: str,
    memory: str,
    image_data_url: str | None = None,
) -> RelayRequest:
    """Reduce stored messages to wire turns (role + content only)."""
    return RelayRequest(
        system=system,
        memory=memory,
        image_data_url=image_data_url,
        messages=[ChatTurn(role=m.role, content=m.content) for m in messages],
    )


async def send_mentor_chat(
    messages: list[Message],
    *,
    system: str,
    memory: str,
    image_data_url: str | None = None,
) -> str:
    """Send one chat turn to the relay and return the mentor's reply text.

    Raises:
        RelayNotConfiguredError: RELAY_URL is unset.
        RelayError: The relay answered with a non-success status.
        httpx.HTTPError: The relay could not be reached.
    """
    url = settings.relay_url
    if not url:
        raise RelayNotConfiguredError

    request = build_relay_request(
        messages, system=system, memory=memory, image_data_url=image_data_url
    )

    async with httpx.AsyncClient(timeout=settings.relay_timeout_seconds) as client:
        resp = await client.post(
            url,
            headers={"Content-Type": "application/json"},
            json=request.to_wire(),
        )

    if not resp.is_success:
        logger.error("Relay returned %d: %s", resp.status_code, resp.text[:200])
        raise RelayError(resp.status_code, resp.text)

    return RelayResponse.model_validate(resp.json()).text
