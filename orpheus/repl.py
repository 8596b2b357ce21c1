"""Line-oriented chat loop on standard input/output."""

import logging
import sys
from typing import Optional, TextIO

from rich.console import Console

from .conversation import ConversationEngine, EngineState
from .errors import BackendCommunicationError, ToolLoopExceeded
from .ui.output import render_error, render_response
from .ui.theme import PALETTE, console as default_console

_log = logging.getLogger(__name__)

DEFAULT_SENTINEL = "END"


class ChatSession:
    """Feeds user lines into a ConversationEngine until the sentinel or EOF.

    Empty lines re-prompt. A failed turn is reported inline and the loop
    continues with the next line.
    """

    def __init__(
        self,
        engine: ConversationEngine,
        stdin: Optional[TextIO] = None,
        console: Optional[Console] = None,
        sentinel: str = DEFAULT_SENTINEL,
    ):
        self.engine = engine
        self.stdin = stdin or sys.stdin
        self.console = console or default_console
        self.sentinel = sentinel
        self.turns = 0

    def read_line(self) -> Optional[str]:
        """Prompt and read one line. None on end of input."""
        self.console.print("> ", end="", style=f"bold {PALETTE.prompt}")
        line = self.stdin.readline()
        if not line:
            return None
        return line.rstrip("\r\n")

    def handle_line(self, line: str) -> bool:
        """Process one input line. Returns False when the session should end."""
        if line == "":
            return True
        if line == self.sentinel:
            self.console.print("Exiting chat...", style=f"dim {PALETTE.text}")
            return False

        self.turns += 1
        try:
            answer = self.engine.run_turn(line)
        except BackendCommunicationError as e:
            _log.info("turn %d failed: %s", self.turns, e)
            render_error(f"Error: {e}", self.console)
            return True
        except ToolLoopExceeded as e:
            render_error(str(e), self.console)
            return True

        render_response(answer, self.console)
        return True

    def run(self) -> None:
        self.console.print(f"Enter prompts (type {self.sentinel} to exit):")
        try:
            while True:
                line = self.read_line()
                if line is None:
                    self.console.print()
                    break
                if not self.handle_line(line):
                    break
        except KeyboardInterrupt:
            self.console.print("\nInterrupted.", style="dim red")
        finally:
            self.engine.end()
        _log.debug("session ended after %d turns (%s)", self.turns, EngineState.SESSION_ENDED.value)
