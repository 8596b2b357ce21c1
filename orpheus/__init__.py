"""Orpheus - DevOps assistant CLI with tool calling."""

__version__ = "0.1.0"

from .cli import cli, OrpheusApp
from .config import ConfigManager, Settings
from .conversation import ConversationEngine

__all__ = [
    "cli",
    "OrpheusApp",
    "ConfigManager",
    "Settings",
    "ConversationEngine",
]
