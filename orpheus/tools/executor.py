"""Execute tool calls by name and fold every outcome into a ToolResult.

Unknown names, validation errors, process failures and unexpected handler
exceptions all come back through the same failure channel so the model can
decide how to recover.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from ..errors import ToolError, UnknownTool
from .schema import ToolDef

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolResult:
    """Output of one tool invocation: success text or failure description."""

    name: str
    output: str
    ok: bool = True


class ToolExecutor:
    """Execute registered tools by name with argument dicts."""

    def __init__(self, tools: Mapping[str, ToolDef]):
        self._tools = tools

    def execute(self, tool_name: str, arguments: Mapping[str, Any]) -> ToolResult:
        """Execute a tool call and return its result.

        Args:
            tool_name: Name of the tool to call.
            arguments: Keyword arguments for the tool handler.

        Returns:
            A ToolResult. Failures are returned, never raised.
        """
        tool = self._tools.get(tool_name)
        if tool is None:
            _log.warning("model requested unknown tool %r", tool_name)
            return ToolResult(tool_name, str(UnknownTool(tool_name)), ok=False)

        try:
            result = tool.handler(**dict(arguments))
        except ToolError as e:
            _log.info("tool %s failed: %s", tool_name, e)
            return ToolResult(tool_name, str(e), ok=False)
        except TypeError as e:
            return ToolResult(tool_name, f"Invalid arguments for {tool_name}: {e}", ok=False)
        except Exception as e:
            _log.exception("tool %s raised", tool_name)
            return ToolResult(tool_name, f"Tool {tool_name} failed: {e}", ok=False)

        return ToolResult(tool_name, result if isinstance(result, str) else str(result))
