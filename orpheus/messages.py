"""Conversation message model and backend reply variants."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class Role(str, Enum):
    USER = "user"
    MODEL = "model"
    TOOL = "tool"


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class ToolCallPart:
    """A tool request the model made, kept so the backend can replay it."""

    name: str
    arguments: dict = field(default_factory=dict)
    call_id: str = ""


@dataclass(frozen=True)
class ToolResultPart:
    name: str
    output: str
    ok: bool = True
    call_id: str = ""


Part = Union[TextPart, ToolCallPart, ToolResultPart]


@dataclass(frozen=True)
class Message:
    """One entry in the conversation history."""

    role: Role
    parts: tuple[Part, ...]

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(Role.USER, (TextPart(text),))

    @classmethod
    def model(cls, text: str) -> "Message":
        return cls(Role.MODEL, (TextPart(text),))

    @property
    def text(self) -> str:
        """Concatenated text parts."""
        return "".join(p.text for p in self.parts if isinstance(p, TextPart))


@dataclass(frozen=True)
class FinalAnswer:
    """The backend produced user-facing text and wants no tool."""

    text: str


@dataclass(frozen=True)
class ToolCall:
    """The backend wants one tool invoked before it continues.

    text holds any commentary the model emitted alongside the call.
    """

    name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    call_id: str = ""
    text: str = ""


Reply = Union[FinalAnswer, ToolCall]
