"""Terminal front end for MentorShell."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from talkorithm.board.whiteboard import Tool

if TYPE_CHECKING:
    from talkorithm.shell.app import MentorShell

logger = logging.getLogger(__name__)

COMMAND_FAILED = "Something went wrong. Check the logs."

HELP = """\
Type a message and press Enter to send it. Commands:
  /voice              speak one utterance
  /save N             save assistant message N to long-term memory
  /play N             read message N aloud
  /stop               stop the voice
  /testvoice          say "Voice ready."
  /memory             list saved memories
  /draw X Y X Y ...   sketch a polyline (logical pixels)
  /tool pen|line|erase
  /board clear        wipe the sketchpad
  /autospeak on|off   read replies aloud
  /autosend on|off    send voice input without review
  /logout             sign out
  /quit               exit"""


def _label(role: str) -> str:
    return "You" if role == "user" else "Professor"


class Console:
    """Reads commands from stdin and renders shell state to stdout."""

    def __init__(self, shell: MentorShell) -> None:
        self.shell = shell
        self._shown: set[str] = set()
        self._last_error: str | None = None
        shell.on_change = self.render

    def render(self) -> None:
        """Print messages not yet shown and any new error."""
        shell = self.shell
        for index, message in enumerate(shell.messages, start=1):
            if message.id in self._shown:
                continue
            self._shown.add(message.id)
            print(f"\n[{index}] {_label(message.role)}: {message.content}")
        if shell.error and shell.error != self._last_error:
            print(f"! {shell.error}")
        self._last_error = shell.error

    def _message_at(self, arg: str):  # noqa: ANN202
        try:
            index = int(arg)
        except ValueError:
            index = 0
        if not 1 <= index <= len(self.shell.messages):
            print(f"No message {arg!r}")
            return None
        return self.shell.messages[index - 1]

    def _show_memories(self) -> None:
        if not self.shell.memories:
            print("Save key insights from the mentor to build a personal DSA guide.")
            return
        for memory in self.shell.memories:
            print(f"- {memory.title}\n  {memory.detail}")

    def _draw(self, args: list[str]) -> None:
        board = self.shell.board
        if board is None:
            print("No sketchpad attached")
            return
        try:
            coords = [float(a) for a in args]
        except ValueError:
            print("Coordinates must be numbers")
            return
        if len(coords) < 4 or len(coords) % 2:
            print("Give at least two X Y points")
            return
        points = list(zip(coords[::2], coords[1::2], strict=True))
        board.pointer_down(*points[0])
        for point in points[1:]:
            board.pointer_move(*point)
        board.pointer_up(*points[-1])
        print("Sketch attached to your next message.")

    async def handle(self, line: str) -> bool:
        """Run one input line. Returns False when the user asked to quit."""
        shell = self.shell
        shell.note_gesture()
        text = line.strip()
        if not text:
            return True
        if not text.startswith("/"):
            shell.input = text
            await shell.send()
            return True

        command, *args = text[1:].split()
        on = bool(args) and args[0].lower() == "on"

        if command == "quit":
            return False
        if command == "help":
            print(HELP)
        elif command == "voice":
            await shell.speak_input()
            if shell.input:
                print(f"(input) {shell.input}")
        elif command == "save" and args:
            message = self._message_at(args[0])
            if message is not None and message.role == "assistant":
                await shell.save_memory(message)
                print("Saved to memory.")
        elif command == "play" and args:
            message = self._message_at(args[0])
            if message is not None:
                await shell.speak_message(message)
        elif command == "stop":
            shell.stop_voice()
        elif command == "testvoice":
            await shell.test_voice()
        elif command == "memory":
            self._show_memories()
        elif command == "draw":
            self._draw(args)
        elif command == "tool" and args and shell.board is not None:
            shell.board.set_tool(Tool(args[0]))
        elif command == "board" and args[:1] == ["clear"] and shell.board is not None:
            shell.board.clear()
        elif command == "autospeak" and args:
            shell.auto_speak = on
        elif command == "autosend" and args:
            shell.auto_send_voice = on
        elif command == "logout":
            await shell.sign_out()
            return False
        else:
            print(f"Unknown command: {text}\n{HELP}")
        return True

    async def run(self) -> None:
        """Sign in and loop over stdin until /quit or EOF."""
        shell = self.shell
        shell.start()
        await shell.sign_in()
        print("Talkorithm: DSA Mentor Studio. /help for commands.")
        try:
            while True:
                try:
                    line = await asyncio.to_thread(input, "> ")
                except EOFError:
                    break
                try:
                    if not await self.handle(line):
                        break
                except ValueError as exc:
                    print(f"! {exc}")
                except Exception:
                    logger.exception("Console command failed: %s", line)
                    print(f"! {COMMAND_FAILED}")
        finally:
            await shell.close()
