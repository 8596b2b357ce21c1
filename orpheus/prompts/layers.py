"""Immutable prompt pipeline that assembles the directive from ordered layers.

Each layer has a name, content string, and priority (lower = earlier in output).
add_layer returns a new PromptPipeline instance.
"""

from dataclasses import dataclass


PRIORITY_PERSONA = 10
PRIORITY_TOOLS = 20
PRIORITY_GUIDELINES = 30
PRIORITY_CONFIG = 40


@dataclass(frozen=True)
class PromptLayer:
    """A single layer in the prompt pipeline."""

    name: str
    content: str
    priority: int


class PromptPipeline:
    """Immutable pipeline that builds a directive from prioritized layers.

    Usage:
        pipeline = (
            PromptPipeline()
            .add_layer("persona", PERSONA, PRIORITY_PERSONA)
            .add_layer("config", config_text, PRIORITY_CONFIG)
        )
        directive = pipeline.build()
    """

    def __init__(self, layers: tuple[PromptLayer, ...] = ()):
        self._layers = layers

    @property
    def layers(self) -> tuple[PromptLayer, ...]:
        return self._layers

    def add_layer(self, name: str, content: str, priority: int) -> "PromptPipeline":
        """Return a new pipeline with the given layer added.

        Whitespace-only content is skipped. Other content is kept verbatim.
        """
        if not content or not content.strip():
            return self
        layer = PromptLayer(name=name, content=content, priority=priority)
        return PromptPipeline(self._layers + (layer,))

    def has_layer(self, name: str) -> bool:
        return any(layer.name == name for layer in self._layers)

    def build(self) -> str:
        """Join all layers sorted by priority with blank lines between them.

        sorted() is stable, so equal priorities keep insertion order.
        """
        ordered = sorted(self._layers, key=lambda layer: layer.priority)
        return "\n\n".join(layer.content for layer in ordered)

    def describe(self) -> list[dict]:
        """Return a summary of layers for display (sorted by priority)."""
        return [
            {"name": layer.name, "priority": layer.priority, "length": len(layer.content)}
            for layer in sorted(self._layers, key=lambda layer: layer.priority)
        ]
