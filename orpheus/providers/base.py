"""Base interface for reasoning backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from ..messages import Message, Reply
    from ..tools.schema import ToolDef


@dataclass
class ProviderConfig:
    """Configuration for a provider."""
    api_key: str
    model: str
    base_url: Optional[str] = None
    temperature: float = 0.7
    max_tokens: Optional[int] = None
    timeout: float = 120.0


class BaseProvider(ABC):
    """A stateless reasoning backend.

    Every call carries the full directive, history and tool set. The backend
    answers with either a FinalAnswer or exactly one ToolCall.
    """

    def __init__(self, config: ProviderConfig):
        self.config = config

    @abstractmethod
    def generate(
        self,
        system: str,
        messages: Sequence["Message"],
        tools: Mapping[str, "ToolDef"],
    ) -> "Reply":
        """Run one reasoning call.

        Raises:
            BackendCommunicationError: transport, auth, quota or decode failure.
        """

    def close(self) -> None:
        """Release any network resources."""
