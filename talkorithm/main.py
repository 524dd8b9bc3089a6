"""Talkorithm entry point."""

import argparse
import asyncio
import logging

from talkorithm.config import settings

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level),
)
logger = logging.getLogger(__name__)


async def _chat() -> None:
    from talkorithm.board.whiteboard import Whiteboard
    from talkorithm.shell.app import MentorShell
    from talkorithm.shell.auth import LocalAuth
    from talkorithm.shell.console import Console
    from talkorithm.speech.bridge import SpeechBridge
    from talkorithm.store.chat_store import ChatStore

    if not settings.relay_url:
        logger.warning("RELAY_URL is empty; every message will fail to reach the mentor")

    shell = MentorShell(
        auth=LocalAuth(),
        store=ChatStore(),
        speech=SpeechBridge(),
        board=Whiteboard(),
    )
    await Console(shell).run()


def main(argv: list[str] | None = None) -> None:
    """Run the relay server or an interactive mentor session."""
    parser = argparse.ArgumentParser(prog="talkorithm", description=__doc__)
    sub = parser.add_subparsers(dest="command", required=True)

    relay = sub.add_parser("relay", help="serve the Gemini chat relay")
    relay.add_argument("--host", default=None)
    relay.add_argument("--port", type=int, default=None)

    sub.add_parser("chat", help="talk to the mentor in this terminal")

    args = parser.parse_args(argv)

    if args.command == "relay":
        from talkorithm.relay.server import run_relay

        logger.info("Starting relay with model %s...", settings.gemini_model)
        run_relay(host=args.host, port=args.port)
    else:
        asyncio.run(_chat())


if __name__ == "__main__":
    main()
