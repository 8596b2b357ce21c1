"""The conversation engine: history, reasoning calls and tool sub-turns.

One engine owns one session's history. A turn appends the user's message,
then alternates between the backend and the tool executor until the backend
produces a final answer. Tool failures become failed tool results in the
history; backend failures propagate to the caller and leave the history as
it is, so the user can retry.
"""

import logging
from enum import Enum
from typing import Callable, Optional, Mapping, TYPE_CHECKING

from .errors import BackendCommunicationError, ToolLoopExceeded
from .messages import (
    FinalAnswer,
    Message,
    Role,
    TextPart,
    ToolCall,
    ToolCallPart,
    ToolResultPart,
)
from .tools.executor import ToolExecutor, ToolResult

if TYPE_CHECKING:
    from .providers.base import BaseProvider
    from .tools.schema import ToolDef

_log = logging.getLogger(__name__)

DEFAULT_MAX_TOOL_ROUNDS = 10


class EngineState(str, Enum):
    AWAITING_INPUT = "awaiting_input"
    REASONING = "reasoning"
    TOOL_CALL = "tool_call"
    FINAL_ANSWER = "final_answer"
    SESSION_ENDED = "session_ended"


class ConversationEngine:
    """Drives one session against a reasoning backend.

    Args:
        provider: The reasoning backend.
        tools: The read-only tool registry.
        directive: Fixed instruction text resent with every call.
        max_tool_rounds: Tool calls allowed in a single turn.
        on_tool_call: Called with each ToolCall before it runs.
        on_tool_result: Called with each ToolResult after it runs.
    """

    def __init__(
        self,
        provider: "BaseProvider",
        tools: Mapping[str, "ToolDef"],
        directive: str,
        max_tool_rounds: int = DEFAULT_MAX_TOOL_ROUNDS,
        on_tool_call: Optional[Callable[[ToolCall], None]] = None,
        on_tool_result: Optional[Callable[[ToolResult], None]] = None,
    ):
        self.provider = provider
        self.tools = tools
        self.directive = directive
        self.max_tool_rounds = max_tool_rounds
        self._executor = ToolExecutor(tools)
        self._on_tool_call = on_tool_call
        self._on_tool_result = on_tool_result
        self._history: list[Message] = []
        self.state = EngineState.AWAITING_INPUT

    @property
    def history(self) -> tuple[Message, ...]:
        return tuple(self._history)

    def _append(self, message: Message) -> None:
        self._history.append(message)

    def end(self) -> None:
        self.state = EngineState.SESSION_ENDED

    def run_turn(self, user_text: str) -> str:
        """Process one user message to a final answer.

        Returns:
            The final answer text, also appended to history.

        Raises:
            BackendCommunicationError: the backend call failed. History keeps
                the user message and any tool results gathered so far.
            ToolLoopExceeded: the model asked for more than max_tool_rounds tools.
        """
        self._append(Message.user(user_text))
        rounds = 0

        try:
            while True:
                self.state = EngineState.REASONING
                reply = self.provider.generate(self.directive, self.history, self.tools)

                if isinstance(reply, FinalAnswer):
                    self.state = EngineState.FINAL_ANSWER
                    self._append(Message.model(reply.text))
                    return reply.text

                if not isinstance(reply, ToolCall):
                    raise BackendCommunicationError(f"unexpected backend reply: {reply!r}")

                if rounds >= self.max_tool_rounds:
                    raise ToolLoopExceeded(self.max_tool_rounds)
                rounds += 1

                self.state = EngineState.TOOL_CALL
                self._run_tool(reply)
        finally:
            self.state = EngineState.AWAITING_INPUT

    def _run_tool(self, call: ToolCall) -> ToolResult:
        call_parts = (TextPart(call.text),) if call.text else ()
        self._append(Message(
            Role.MODEL,
            call_parts + (ToolCallPart(call.name, dict(call.arguments), call.call_id),),
        ))

        if self._on_tool_call:
            self._on_tool_call(call)

        _log.debug("tool call %s(%s)", call.name, call.arguments)
        result = self._executor.execute(call.name, call.arguments)

        self._append(Message(
            Role.TOOL,
            (ToolResultPart(result.name, result.output, result.ok, call.call_id),),
        ))

        if self._on_tool_result:
            self._on_tool_result(result)
        return result
