"""Outbound call to the Gemini generateContent endpoint."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from talkorithm.config import settings
from talkorithm.relay.models import GenerateContentResponse

logger = logging.getLogger(__name__)

UPSTREAM_TIMEOUT_SECONDS = 60


@dataclass
class UpstreamReply:
    """Status and raw body of one upstream call."""

    status: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self) -> str:
        """Extract the reply text; empty when the body has no usable candidate."""
        try:
            data = json.loads(self.body)
        except ValueError:
            logger.warning("Gemini returned a non-JSON success body")
            return ""
        return GenerateContentResponse.parse(data).text()


async def generate_content(body: dict[str, Any], *, api_key: str) -> UpstreamReply:
    """POST *body* to Gemini once. No retry; transport errors propagate."""
    url = settings.gemini_endpoint()
    async with httpx.AsyncClient(timeout=UPSTREAM_TIMEOUT_SECONDS) as client:
        resp = await client.post(
            url,
            params={"key": api_key},
            headers={"Content-Type": "application/json"},
            json=body,
        )

    reply = UpstreamReply(status=resp.status_code, body=resp.text)
    if not reply.ok:
        logger.warning("Gemini returned %d: %s", reply.status, reply.body[:200])
    return reply
