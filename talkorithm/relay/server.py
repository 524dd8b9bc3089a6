"""Stateless HTTP relay between the mentor shell and Gemini.

Every path accepts the same contract: ``OPTIONS`` answers the CORS
preflight, ``POST`` carries a chat turn, anything else is a 405. Each
request is handled on its own; nothing is shared between requests.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from aiohttp import web
from pydantic import ValidationError

from talkorithm.config import settings
from talkorithm.relay import upstream
from talkorithm.relay.models import RelayRequest, RelayResponse
from talkorithm.relay.payload import build_generate_request

logger = logging.getLogger(__name__)


def cors_headers(request: web.Request) -> dict[str, str]:
    """CORS headers reflecting the caller's Origin (``*`` when absent)."""
    return {
        "Access-Control-Allow-Origin": request.headers.get("Origin", "*"),
        "Access-Control-Allow-Methods": "POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
    }


async def _read_request(request: web.Request) -> RelayRequest | None:
    """Parse and validate the POST body, or None if it is unusable."""
    try:
        payload: Any = await request.json()
    except ValueError:
        logger.warning("Relay bad request: invalid JSON")
        return None
    try:
        return RelayRequest.model_validate(payload)
    except ValidationError as exc:
        logger.warning("Relay bad request: %d validation error(s)", exc.error_count())
        return None


async def handle_relay(request: web.Request) -> web.Response:
    """Route any method on any path through the relay contract."""
    if request.method == "OPTIONS":
        return web.Response(status=204, headers=cors_headers(request))

    if request.method != "POST":
        return web.Response(text="Method not allowed", status=405)

    api_key = settings.gemini_api_key
    if not api_key:
        logger.error("Relay request refused: GEMINI_API_KEY is not configured")
        return web.Response(text="Missing GEMINI_API_KEY", status=500)

    chat = await _read_request(request)
    if chat is None:
        return web.json_response({"error": "invalid request body"}, status=400)

    logger.info(
        "Relay turn: messages=%d, image=%s",
        len(chat.messages),
        bool(chat.image_data_url),
    )

    body = build_generate_request(chat)
    try:
        reply = await upstream.generate_content(body, api_key=api_key)
    except httpx.HTTPError:
        logger.exception("Gemini request failed")
        return web.json_response({"error": "upstream unreachable"}, status=502)

    if not reply.ok:
        return web.Response(text=reply.body, status=reply.status)

    result = RelayResponse(text=reply.text())
    return web.json_response(result.model_dump(), headers=cors_headers(request))


def create_relay_app() -> web.Application:
    """Build the aiohttp Application with the catch-all relay route."""
    app = web.Application()
    app.router.add_route("*", "/{tail:.*}", handle_relay)
    return app


class RelayServer:
    """Manages the aiohttp server lifecycle."""

    def __init__(self, host: str | None = None, port: int | None = None) -> None:
        self.host = host or settings.relay_host
        self.port = port or settings.relay_port
        self._runner: web.AppRunner | None = None

    async def start(self) -> None:
        """Start listening for chat turns."""
        if not settings.gemini_api_key:
            logger.warning("GEMINI_API_KEY empty; every POST will answer 500")

        self._runner = web.AppRunner(create_relay_app())
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info("Relay listening on %s:%d (model=%s)", self.host, self.port, settings.gemini_model)

    async def stop(self) -> None:
        """Shut down the server gracefully."""
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            logger.info("Relay stopped")


async def serve_relay(host: str | None = None, port: int | None = None) -> None:
    """Run a RelayServer until the task is cancelled."""
    server = RelayServer(host, port)
    await server.start()
    try:
        await asyncio.Event().wait()
    finally:
        await server.stop()


def run_relay(host: str | None = None, port: int | None = None) -> None:
    """Serve the relay in the foreground until interrupted."""
    try:
        asyncio.run(serve_relay(host, port))
    except KeyboardInterrupt:
        logger.info("Relay interrupted")
