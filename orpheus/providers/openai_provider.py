"""OpenAI chat completions provider (also for compatible endpoints via base_url)."""

import json
import logging
from typing import Mapping, Sequence, TYPE_CHECKING

import httpx

from ..errors import BackendCommunicationError
from ..messages import (
    FinalAnswer,
    Message,
    Reply,
    Role,
    TextPart,
    ToolCall,
    ToolCallPart,
    ToolResultPart,
)
from .base import BaseProvider, ProviderConfig
from .registry import register_provider

if TYPE_CHECKING:
    from ..tools.schema import ToolDef

_log = logging.getLogger(__name__)


def _to_messages(message: Message) -> list[dict]:
    """Translate one history entry into chat completion messages."""
    if message.role is Role.USER:
        return [{"role": "user", "content": message.text}]

    if message.role is Role.TOOL:
        return [
            {"role": "tool", "tool_call_id": part.call_id or part.name, "content": part.output}
            for part in message.parts
            if isinstance(part, ToolResultPart)
        ]

    calls = [p for p in message.parts if isinstance(p, ToolCallPart)]
    entry: dict = {"role": "assistant", "content": message.text or None}
    if calls:
        entry["tool_calls"] = [
            {
                "id": call.call_id or call.name,
                "type": "function",
                "function": {"name": call.name, "arguments": json.dumps(call.arguments)},
            }
            for call in calls
        ]
    elif entry["content"] is None:
        entry["content"] = ""
    return [entry]


@register_provider("openai")
class OpenAIProvider(BaseProvider):
    """OpenAI API provider - supports custom base_url for Azure/proxies."""

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        self.base_url = config.base_url or "https://api.openai.com/v1"
        self.client = httpx.Client(timeout=config.timeout)

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    def build_payload(
        self,
        system: str,
        messages: Sequence[Message],
        tools: Mapping[str, "ToolDef"],
    ) -> dict:
        chat = [{"role": "system", "content": system}] if system else []
        for message in messages:
            chat.extend(_to_messages(message))

        payload = {
            "model": self.config.model,
            "messages": chat,
            "temperature": self.config.temperature,
        }
        if tools:
            payload["tools"] = [
                {
                    "type": "function",
                    "function": {
                        "name": td.name,
                        "description": td.description,
                        "parameters": td.parameters,
                    },
                }
                for td in tools.values()
            ]
        if self.config.max_tokens:
            payload["max_tokens"] = self.config.max_tokens
        return payload

    def generate(
        self,
        system: str,
        messages: Sequence[Message],
        tools: Mapping[str, "ToolDef"],
    ) -> Reply:
        url = f"{self.base_url}/chat/completions"
        payload = self.build_payload(system, messages, tools)

        try:
            response = self.client.post(url, json=payload, headers=self._headers())
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise BackendCommunicationError(
                f"OpenAI returned {e.response.status_code}: {e.response.text[:500]}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise BackendCommunicationError(f"OpenAI request failed: {e}") from e

        return self.parse_reply(data)

    @staticmethod
    def parse_reply(data) -> Reply:
        if not isinstance(data, dict):
            raise BackendCommunicationError(f"OpenAI returned an unexpected body: {str(data)[:200]}")
        try:
            return OpenAIProvider._read_choices(data)
        except (AttributeError, TypeError, KeyError) as e:
            raise BackendCommunicationError(f"Malformed OpenAI response: {e}") from e

    @staticmethod
    def _read_choices(data: dict) -> Reply:
        choices = data.get("choices") or []
        if not choices:
            raise BackendCommunicationError("OpenAI returned no choices")

        message = choices[0].get("message") or {}
        content = message.get("content") or ""
        tool_calls = message.get("tool_calls") or []
        if not tool_calls:
            return FinalAnswer(content)

        if len(tool_calls) > 1:
            _log.warning("OpenAI requested %d tool calls; only the first is executed", len(tool_calls))
        tc = tool_calls[0]
        fn = tc.get("function") or {}
        if not fn.get("name"):
            raise BackendCommunicationError("OpenAI tool call has no function name")

        # arguments arrive as a JSON string or, from some endpoints, an object
        arguments = fn.get("arguments") or "{}"
        if not isinstance(arguments, dict):
            try:
                arguments = json.loads(arguments)
            except (json.JSONDecodeError, TypeError):
                arguments = {}
        return ToolCall(
            name=fn["name"],
            arguments=arguments if isinstance(arguments, dict) else {},
            call_id=tc.get("id") or "",
            text=content,
        )

    def close(self) -> None:
        self.client.close()
