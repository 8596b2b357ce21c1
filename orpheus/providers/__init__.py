"""Reasoning backends."""

from .base import BaseProvider, ProviderConfig
from .gemini import GeminiProvider
from .openai_provider import OpenAIProvider

__all__ = [
    "BaseProvider",
    "ProviderConfig",
    "GeminiProvider",
    "OpenAIProvider",
]
