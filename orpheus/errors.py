"""Error taxonomy for Orpheus.

Tool-level errors are turned into failed tool results and fed back to the
model. Backend errors are reported for the current turn only. StartupFatal
is the one class that stops the process.
"""

from dataclasses import dataclass
from typing import Optional


class OrpheusError(Exception):
    """Base class for all Orpheus errors."""


@dataclass(frozen=True)
class ToolSourceUnavailable:
    """Diagnostic recorded when a tool source could not be reached."""

    source: str
    reason: str

    def __str__(self) -> str:
        return f"tool source '{self.source}' unavailable: {self.reason}"


class ToolSourceError(OrpheusError):
    """Raised inside a tool source while fetching its catalog."""


class ToolError(OrpheusError):
    """A tool invocation failed. Surfaced to the model, never to the process."""


class EmptyCommand(ToolError):
    def __init__(self) -> None:
        super().__init__("empty command")


class InvalidCommandPrefix(ToolError):
    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"command must start with '{expected}', got '{actual}'")


class CommandExecutionError(ToolError):
    """The process could not start, exited non-zero, or timed out."""

    def __init__(
        self,
        command: str,
        cause: str,
        output: str = "",
        returncode: Optional[int] = None,
    ) -> None:
        self.command = command
        self.cause = cause
        self.output = output
        self.returncode = returncode
        super().__init__(f"{command} command error: {cause}\nOutput: {output}")


class UnknownTool(ToolError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class ToolInvocationError(ToolError):
    """A remote tool reported an error result."""


class BackendCommunicationError(OrpheusError):
    """The reasoning backend call failed (network, auth, malformed response)."""


class ToolLoopExceeded(OrpheusError):
    """The model kept requesting tools past the per-turn limit."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"Model requested more than {limit} tool calls in one turn")


class StartupFatal(OrpheusError):
    """Required local configuration is missing; no directive can be built."""
