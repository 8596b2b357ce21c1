"""Remote tool catalog reached over MCP streamable HTTP.

Only the subset Orpheus needs is spoken: initialize, tools/list and
tools/call, as JSON-RPC 2.0 POSTs. The server may answer with plain JSON or
with a text/event-stream body; both are accepted.
"""

import itertools
import json
import logging
import threading
from typing import Any, Optional

import httpx

from ..errors import ToolInvocationError, ToolSourceError
from ..tools.schema import ToolDef
from .base import ToolSource

_log = logging.getLogger(__name__)

PROTOCOL_VERSION = "2025-03-26"
CLIENT_INFO = {"name": "orpheus", "version": "0.1.0"}


def _parse_sse(body: str, request_id: int) -> Optional[dict]:
    """Return the JSON-RPC message for request_id from an SSE body."""
    data_lines: list[str] = []
    for line in body.splitlines() + [""]:
        if line.startswith("data:"):
            data_lines.append(line[5:].lstrip())
            continue
        if line.strip() or not data_lines:
            continue
        # Blank line terminates an event
        payload = "\n".join(data_lines)
        data_lines = []
        try:
            message = json.loads(payload)
        except json.JSONDecodeError:
            continue
        if isinstance(message, dict) and message.get("id") == request_id:
            return message
    return None


def _flatten_content(result: dict) -> str:
    """Join the text parts of a tools/call result."""
    texts = []
    for part in result.get("content", []) or []:
        if part.get("type") == "text":
            texts.append(part.get("text", ""))
        else:
            texts.append(json.dumps(part))
    if not texts and "structuredContent" in result:
        texts.append(json.dumps(result["structuredContent"]))
    return "\n".join(texts)


class RemoteCatalogSource(ToolSource):
    """Tool catalog served by a remote MCP endpoint.

    Args:
        name: Short label for this catalog (used as the "remote:<name>" source).
        base_url: Endpoint URL, e.g. https://api.githubcopilot.com/mcp/.
        token: Bearer credential. Empty means no Authorization header.
        timeout: HTTP timeout in seconds.
        transport: Optional httpx transport, mostly for tests.
    """

    def __init__(
        self,
        name: str,
        base_url: str,
        token: str = "",
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        super().__init__()
        self._name = name
        self.base_url = base_url
        self.token = token
        self.client = httpx.Client(timeout=timeout, transport=transport)
        self._session_id: Optional[str] = None
        self._initialized = False
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return f"remote:{self._name}"

    def _headers(self) -> dict:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json, text/event-stream",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if self._session_id:
            headers["Mcp-Session-Id"] = self._session_id
        return headers

    def _post(self, payload: dict) -> httpx.Response:
        response = self.client.post(self.base_url, json=payload, headers=self._headers())
        response.raise_for_status()
        return response

    def _request(self, method: str, params: Optional[dict] = None) -> dict:
        """Send a JSON-RPC request and return its result object."""
        with self._lock:
            request_id = next(self._ids)
        payload: dict[str, Any] = {"jsonrpc": "2.0", "id": request_id, "method": method}
        if params is not None:
            payload["params"] = params

        response = self._post(payload)
        session_id = response.headers.get("mcp-session-id")
        if session_id:
            self._session_id = session_id

        if response.headers.get("content-type", "").startswith("text/event-stream"):
            message = _parse_sse(response.text, request_id)
        else:
            message = response.json()

        if not isinstance(message, dict):
            raise ToolSourceError(f"{method}: malformed response")
        if "error" in message:
            error = message["error"] or {}
            raise ToolSourceError(f"{method}: {error.get('message', error)}")
        result = message.get("result")
        if not isinstance(result, dict):
            raise ToolSourceError(f"{method}: response has no result")
        return result

    def _notify(self, method: str) -> None:
        self._post({"jsonrpc": "2.0", "method": method})

    def connect(self) -> None:
        """Run the MCP initialize handshake once."""
        if self._initialized:
            return
        result = self._request("initialize", {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {},
            "clientInfo": CLIENT_INFO,
        })
        _log.debug(
            "connected to %s (%s)",
            self.base_url, result.get("serverInfo", {}).get("name", "unknown server"),
        )
        self._notify("notifications/initialized")
        self._initialized = True

    def list_tools(self) -> list[dict]:
        """Return the raw catalog entries, following pagination cursors."""
        self.connect()
        entries: list[dict] = []
        cursor = None
        while True:
            result = self._request("tools/list", {"cursor": cursor} if cursor else {})
            entries.extend(result.get("tools", []))
            cursor = result.get("nextCursor")
            if not cursor:
                return entries

    def call_tool(self, tool_name: str, arguments: dict) -> str:
        """Invoke a remote tool and return its text output."""
        try:
            result = self._request("tools/call", {"name": tool_name, "arguments": arguments})
        except (httpx.HTTPError, ToolSourceError, ValueError) as e:
            raise ToolInvocationError(f"{tool_name} failed: {e}") from e

        text = _flatten_content(result)
        if result.get("isError"):
            raise ToolInvocationError(text or f"{tool_name} reported an error")
        return text

    def _make_handler(self, tool_name: str):
        def handler(**arguments: Any) -> str:
            return self.call_tool(tool_name, arguments)
        return handler

    def load(self) -> list[ToolDef]:
        descriptors = []
        for entry in self.list_tools():
            tool_name = entry.get("name")
            if not tool_name:
                continue
            descriptors.append(ToolDef(
                name=tool_name,
                description=entry.get("description", "") or "",
                parameters=entry.get("inputSchema") or {"type": "object", "properties": {}},
                handler=self._make_handler(tool_name),
                source=self.name,
            ))
        _log.debug("%s listed %d tools", self.name, len(descriptors))
        return descriptors

    def close(self) -> None:
        self.client.close()
