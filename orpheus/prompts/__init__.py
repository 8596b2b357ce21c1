"""Directive assembly."""

from .directive import (
    GUIDELINES,
    PERSONA,
    build_directive,
    load_config_document,
    render_tool_catalog,
)
from .layers import PromptLayer, PromptPipeline

__all__ = [
    "GUIDELINES",
    "PERSONA",
    "build_directive",
    "load_config_document",
    "render_tool_catalog",
    "PromptLayer",
    "PromptPipeline",
]
