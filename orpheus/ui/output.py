"""Console rendering for the chat loop and CLI commands."""

from typing import Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.text import Text

from .theme import PALETTE, console as _default_console


def _out(target: Optional[Console]) -> Console:
    return target or _default_console


def render_response(text: str, target: Optional[Console] = None) -> None:
    """Render a final model answer."""
    _out(target).print(Markdown(text) if text.strip() else Text(""))


def render_error(text: str, target: Optional[Console] = None) -> None:
    """Render an error message."""
    err = Text()
    err.append("err ", style=f"bold {PALETTE.error}")
    err.append("| ", style=f"dim {PALETTE.text_muted}")
    err.append(text, style=PALETTE.error)
    _out(target).print(err)


def render_command(command: str, target: Optional[Console] = None) -> None:
    """Echo a command line a local tool is about to run."""
    line = Text()
    line.append("$ ", style=f"bold {PALETTE.command}")
    line.append(command, style=PALETTE.command)
    _out(target).print(line)


def render_tool_result(name: str, ok: bool, target: Optional[Console] = None) -> None:
    """Render a one-line status for a finished tool call."""
    line = Text()
    line.append("tool ", style=f"dim {PALETTE.text_dim}")
    line.append(name, style=PALETTE.text)
    line.append(" ok" if ok else " failed", style=PALETTE.ok if ok else PALETTE.error)
    _out(target).print(line)


def render_header(title: str, subtitle: str = "", target: Optional[Console] = None) -> None:
    header = Text(title, style=f"bold {PALETTE.accent}")
    if subtitle:
        header.append(f"  {subtitle}", style=f"dim {PALETTE.text}")
    _out(target).print(header)
