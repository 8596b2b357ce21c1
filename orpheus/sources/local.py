"""Local command tools: a gcloud CLI tool and a general Linux command tool."""

from typing import Callable, Optional

from ..tools.command import CommandRunner
from ..tools.schema import ToolDef, callable_to_tool_def
from ..ui.output import render_command
from .base import ToolSource

GCLOUD_TOOL = "execute_gcloud_command"
LINUX_TOOL = "execute_linux_command"


def _command_tool(runner: CommandRunner, echo: Callable[[str], None]):
    def run_command(command: str) -> str:
        """Run a command line without a shell.

        The command is split on whitespace; quoting is not supported.

        Args:
            command: The full command line, program name first.
        """
        echo(command)
        return runner.run(command)

    return run_command


class LocalCommandSource(ToolSource):
    """Builds the two command-execution tools that are always available."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        echo: Callable[[str], None] = render_command,
    ):
        super().__init__()
        self.timeout = timeout
        self._echo = echo

    @property
    def name(self) -> str:
        return "local"

    def load(self) -> list[ToolDef]:
        gcloud = CommandRunner(prefix="gcloud", timeout=self.timeout)
        linux = CommandRunner(timeout=self.timeout, label="linux")
        return [
            callable_to_tool_def(
                GCLOUD_TOOL,
                _command_tool(gcloud, self._echo),
                description="Execute Google Cloud CLI commands",
                source=self.name,
            ),
            callable_to_tool_def(
                LINUX_TOOL,
                _command_tool(linux, self._echo),
                description="Execute Linux system commands",
                source=self.name,
            ),
        ]
