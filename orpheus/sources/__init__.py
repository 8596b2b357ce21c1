"""Tool sources feeding the registry."""

from .base import ToolSource
from .local import GCLOUD_TOOL, LINUX_TOOL, LocalCommandSource
from .remote import RemoteCatalogSource

__all__ = [
    "ToolSource",
    "LocalCommandSource",
    "RemoteCatalogSource",
    "GCLOUD_TOOL",
    "LINUX_TOOL",
]
