"""Tool descriptors and conversion of Python callables to JSON Schema.

Local tools are plain functions; their input schema is derived from the
signature and the Google-style docstring. Remote tools arrive with their
schema already built and are wrapped directly in a ToolDef.
"""

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional, get_type_hints


_TYPE_MAP = {
    str: {"type": "string"},
    int: {"type": "integer"},
    float: {"type": "number"},
    bool: {"type": "boolean"},
    list: {"type": "array"},
    dict: {"type": "object"},
}


@dataclass(frozen=True)
class ToolDef:
    """An invocable capability: name, description, input schema and handler."""

    name: str
    description: str
    parameters: dict
    handler: Callable[..., str]
    source: str = "local"


def _annotation_to_schema(annotation: Any) -> dict:
    """Convert a Python type annotation to a JSON Schema type."""
    if annotation is inspect.Parameter.empty or annotation is None:
        return {"type": "string"}

    schema = _TYPE_MAP.get(annotation)
    if schema:
        return dict(schema)

    origin = getattr(annotation, "__origin__", None)
    args = getattr(annotation, "__args__", ())

    # Optional[X] is Union[X, None]
    if origin is not None and len(args) == 2 and type(None) in args:
        inner = [a for a in args if a is not type(None)][0]
        return _annotation_to_schema(inner)

    if origin is list and args:
        return {"type": "array", "items": _annotation_to_schema(args[0])}

    if origin is dict:
        return {"type": "object"}

    return {"type": "string"}


def callable_to_tool_def(
    name: str,
    fn: Callable[..., str],
    description: str = "",
    source: str = "local",
) -> ToolDef:
    """Build a ToolDef from a Python callable using its signature and docstring.

    Args:
        name: Tool name for the registry.
        fn: The callable to introspect.
        description: Used instead of the docstring summary when given.
        source: Name of the tool source that owns the callable.

    Returns:
        A ToolDef with JSON Schema parameters derived from type annotations.
    """
    sig = inspect.signature(fn)
    doc = inspect.getdoc(fn) or ""

    try:
        hints = get_type_hints(fn)
    except Exception:
        hints = {}

    properties = {}
    required = []

    for param_name, param in sig.parameters.items():
        if param_name in ("self", "cls"):
            continue

        annotation = hints.get(param_name, param.annotation)
        prop_schema = _annotation_to_schema(annotation)

        param_doc = _extract_param_doc(doc, param_name)
        if param_doc:
            prop_schema["description"] = param_doc

        properties[param_name] = prop_schema

        if param.default is inspect.Parameter.empty:
            required.append(param_name)

    parameters = {
        "type": "object",
        "properties": properties,
    }
    if required:
        parameters["required"] = required

    return ToolDef(
        name=name,
        description=description or _summary_line(doc),
        parameters=parameters,
        handler=fn,
        source=source,
    )


def _summary_line(docstring: str) -> str:
    return docstring.strip().split("\n", 1)[0] if docstring else ""


def _extract_param_doc(docstring: str, param_name: str) -> Optional[str]:
    """Extract a parameter's description from a Google-style docstring."""
    if not docstring:
        return None

    in_args = False
    for line in docstring.split("\n"):
        stripped = line.strip()

        if stripped.lower().startswith("args:"):
            in_args = True
            continue

        if not in_args:
            continue

        # A new section header ends the Args block
        if stripped.endswith(":") and not line.startswith(" "):
            break

        if stripped.startswith(f"{param_name}:") or stripped.startswith(f"{param_name} ("):
            colon_idx = stripped.index(":")
            return stripped[colon_idx + 1:].strip()

    return None
