"""Shared test helpers."""

from orpheus.providers.base import BaseProvider, ProviderConfig


class ScriptedProvider(BaseProvider):
    """Replays a fixed list of replies and records what it was sent."""

    def __init__(self, replies):
        super().__init__(ProviderConfig(api_key="key", model="scripted"))
        self.replies = list(replies)
        self.calls = []

    def generate(self, system, messages, tools):
        self.calls.append({"system": system, "messages": tuple(messages), "tools": dict(tools)})
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply
