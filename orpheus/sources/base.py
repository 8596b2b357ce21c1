"""Base interface for tool sources."""

import logging
from abc import ABC, abstractmethod
from typing import Optional, TYPE_CHECKING

from ..errors import ToolSourceUnavailable

if TYPE_CHECKING:
    from ..tools.schema import ToolDef

_log = logging.getLogger(__name__)


class ToolSource(ABC):
    """An origin of tool descriptors, used only while building the registry.

    Subclasses implement load(). fetch_descriptors() never raises: any
    failure degrades to an empty list and is kept on last_error.
    """

    def __init__(self) -> None:
        self.last_error: Optional[ToolSourceUnavailable] = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique source identifier."""

    @abstractmethod
    def load(self) -> list["ToolDef"]:
        """Return this source's descriptors. May raise."""

    def fetch_descriptors(self) -> list["ToolDef"]:
        """Return this source's descriptors, or [] if the source is unavailable."""
        self.last_error = None
        try:
            return list(self.load())
        except Exception as e:
            self.last_error = ToolSourceUnavailable(self.name, str(e) or type(e).__name__)
            _log.warning("%s", self.last_error)
            return []
