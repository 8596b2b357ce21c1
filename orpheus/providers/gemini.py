"""Google Gemini provider implementation."""

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

# JSON Schema keys the function_declarations endpoint rejects
_UNSUPPORTED_SCHEMA_KEYS = frozenset({"$schema", "additionalProperties", "$defs", "definitions"})


def clean_schema(schema):
    """Drop schema keywords Gemini does not accept, recursively."""
    if isinstance(schema, dict):
        return {
            key: clean_schema(value)
            for key, value in schema.items()
            if key not in _UNSUPPORTED_SCHEMA_KEYS
        }
    if isinstance(schema, list):
        return [clean_schema(item) for item in schema]
    return schema


def _to_content(message: Message) -> dict:
    parts = []
    for part in message.parts:
        if isinstance(part, TextPart):
            parts.append({"text": part.text})
        elif isinstance(part, ToolCallPart):
            parts.append({"functionCall": {"name": part.name, "args": part.arguments}})
        elif isinstance(part, ToolResultPart):
            key = "result" if part.ok else "error"
            parts.append({
                "functionResponse": {
                    "name": part.name,
                    "response": {key: part.output},
                }
            })
    role = "model" if message.role is Role.MODEL else "user"
    return {"role": role, "parts": parts}


@register_provider("gemini")
class GeminiProvider(BaseProvider):
    """Google Gemini API provider."""

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        self.base_url = config.base_url or "https://generativelanguage.googleapis.com/v1beta/models"
        self.client = httpx.Client(timeout=config.timeout)
        # OAuth tokens start with "ya29." and use Bearer auth; API keys use ?key=
        self._use_bearer = config.api_key.startswith("ya29.")

    def _auth_params(self) -> tuple[dict, dict]:
        """Return (headers, params) for authentication."""
        headers = {"Content-Type": "application/json"}
        if self._use_bearer:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
            return headers, {}
        return headers, {"key": self.config.api_key}

    def build_payload(
        self,
        system: str,
        messages: Sequence[Message],
        tools: Mapping[str, "ToolDef"],
    ) -> dict:
        payload = {
            "contents": [_to_content(m) for m in messages],
            "generationConfig": {
                "temperature": self.config.temperature,
                "maxOutputTokens": self.config.max_tokens or 8192,
            },
        }
        if system:
            payload["systemInstruction"] = {"parts": [{"text": system}]}
        if tools:
            payload["tools"] = [{
                "function_declarations": [
                    {
                        "name": td.name,
                        "description": td.description,
                        "parameters": clean_schema(td.parameters),
                    }
                    for td in tools.values()
                ]
            }]
        return payload

    def generate(
        self,
        system: str,
        messages: Sequence[Message],
        tools: Mapping[str, "ToolDef"],
    ) -> Reply:
        """Gemini-native generateContent call with function declarations."""
        url = f"{self.base_url}/{self.config.model}:generateContent"
        headers, params = self._auth_params()
        payload = self.build_payload(system, messages, tools)

        try:
            response = self.client.post(url, json=payload, params=params, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise BackendCommunicationError(
                f"Gemini returned {e.response.status_code}: {e.response.text[:500]}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise BackendCommunicationError(f"Gemini request failed: {e}") from e

        return self.parse_reply(data)

    @staticmethod
    def parse_reply(data) -> Reply:
        """Map a generateContent response to FinalAnswer or ToolCall.

        Raises:
            BackendCommunicationError: the body has no usable candidate.
        """
        if not isinstance(data, dict):
            raise BackendCommunicationError(f"Gemini returned an unexpected body: {str(data)[:200]}")
        try:
            return GeminiProvider._read_candidates(data)
        except (AttributeError, TypeError, KeyError) as e:
            raise BackendCommunicationError(f"Malformed Gemini response: {e}") from e

    @staticmethod
    def _read_candidates(data: dict) -> Reply:
        candidates = data.get("candidates") or []
        if not candidates:
            reason = (data.get("promptFeedback") or {}).get("blockReason")
            detail = f" (blocked: {reason})" if reason else ""
            raise BackendCommunicationError(f"Gemini returned no candidates{detail}")

        candidate = candidates[0]
        content = candidate.get("content")
        if not content:
            reason = candidate.get("finishReason")
            detail = f" (finish reason: {reason})" if reason else ""
            raise BackendCommunicationError(f"Gemini candidate has no content{detail}")

        parts = content.get("parts") or []
        text_parts = []
        function_calls = []
        for part in parts:
            if "functionCall" in part:
                function_calls.append(part["functionCall"])
            elif "text" in part:
                text_parts.append(part["text"])

        text = "".join(text_parts)
        if not function_calls:
            return FinalAnswer(text)

        if len(function_calls) > 1:
            _log.warning(
                "Gemini requested %d function calls; only %s is executed",
                len(function_calls), function_calls[0].get("name"),
            )
        call = function_calls[0]
        name = call.get("name")
        if not name:
            raise BackendCommunicationError("Gemini function call has no name")
        args = call.get("args") or {}
        if not isinstance(args, dict):
            raise BackendCommunicationError(f"Gemini function call {name} has non-object args")
        return ToolCall(name=name, arguments=args, text=text)

    def close(self) -> None:
        self.client.close()
