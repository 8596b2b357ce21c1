"""Merge descriptors from every tool source into one read-only registry.

Sources are fetched in parallel. The merge runs after all of them finish and
walks them in declaration order, so the result does not depend on which
source answered first.
"""

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Sequence, TYPE_CHECKING

from ..errors import ToolSourceUnavailable
from .schema import ToolDef

if TYPE_CHECKING:
    from ..sources.base import ToolSource

_log = logging.getLogger(__name__)


class MergePolicy(str, Enum):
    """What happens when two sources register the same tool name."""

    FIRST_WINS = "first_wins"
    LAST_WINS = "last_wins"


@dataclass(frozen=True)
class ToolConflict:
    """A name collision resolved during the merge."""

    name: str
    kept: str
    dropped: str


class ToolRegistry(Mapping):
    """Read-only mapping of tool name -> ToolDef, in merge order."""

    def __init__(
        self,
        tools: dict[str, ToolDef],
        conflicts: Sequence[ToolConflict] = (),
        unavailable: Sequence[ToolSourceUnavailable] = (),
    ):
        self._tools = dict(tools)
        self.conflicts = tuple(conflicts)
        self.unavailable = tuple(unavailable)

    def __getitem__(self, name: str) -> ToolDef:
        return self._tools[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __repr__(self) -> str:
        return f"ToolRegistry({list(self._tools)})"


def merge_descriptors(
    batches: Sequence[Sequence[ToolDef]],
    policy: MergePolicy = MergePolicy.FIRST_WINS,
) -> tuple[dict[str, ToolDef], list[ToolConflict]]:
    """Merge descriptor batches in order, applying the collision policy."""
    tools: dict[str, ToolDef] = {}
    conflicts: list[ToolConflict] = []

    for batch in batches:
        for tool in batch:
            existing = tools.get(tool.name)
            if existing is None:
                tools[tool.name] = tool
                continue

            if policy is MergePolicy.LAST_WINS:
                conflict = ToolConflict(tool.name, kept=tool.source, dropped=existing.source)
                tools[tool.name] = tool
            else:
                conflict = ToolConflict(tool.name, kept=existing.source, dropped=tool.source)
            conflicts.append(conflict)
            _log.warning(
                "tool name conflict: %s (kept %s, dropped %s)",
                conflict.name, conflict.kept, conflict.dropped,
            )

    return tools, conflicts


def build_tool_registry(
    sources: Sequence["ToolSource"],
    policy: MergePolicy = MergePolicy.FIRST_WINS,
    max_workers: Optional[int] = None,
) -> ToolRegistry:
    """Fetch every source in parallel and merge them in declaration order.

    Args:
        sources: Tool sources, remote first then local.
        policy: Name collision rule.
        max_workers: Thread pool size; defaults to one thread per source.

    Returns:
        The merged registry. Never raises because of a failing source.
    """
    if not sources:
        return ToolRegistry({})

    with ThreadPoolExecutor(max_workers=max_workers or len(sources)) as pool:
        futures = [pool.submit(source.fetch_descriptors) for source in sources]

    batches: list[list[ToolDef]] = []
    unavailable: list[ToolSourceUnavailable] = []
    for source, future in zip(sources, futures):
        try:
            batches.append(future.result())
        except Exception as e:
            diag = ToolSourceUnavailable(source.name, str(e) or type(e).__name__)
            _log.warning("%s", diag)
            unavailable.append(diag)
            continue
        if source.last_error is not None:
            unavailable.append(source.last_error)

    tools, conflicts = merge_descriptors(batches, policy)
    _log.debug("registry built with %d tools: %s", len(tools), list(tools))
    return ToolRegistry(tools, conflicts, unavailable)
