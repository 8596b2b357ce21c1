"""Terminal output for Orpheus."""

from .output import (
    render_command,
    render_error,
    render_header,
    render_response,
    render_tool_result,
)
from .theme import PALETTE, console

__all__ = [
    "console",
    "PALETTE",
    "render_command",
    "render_error",
    "render_header",
    "render_response",
    "render_tool_result",
]
