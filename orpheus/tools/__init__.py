"""Tool descriptors, the merged registry, and execution."""

from .schema import ToolDef, callable_to_tool_def
from .executor import ToolExecutor, ToolResult
from .registry import MergePolicy, ToolConflict, ToolRegistry, build_tool_registry

__all__ = [
    "ToolDef",
    "callable_to_tool_def",
    "ToolExecutor",
    "ToolResult",
    "MergePolicy",
    "ToolConflict",
    "ToolRegistry",
    "build_tool_registry",
]
