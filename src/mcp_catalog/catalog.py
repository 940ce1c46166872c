"""Tool catalog: descriptors, the tool execution contract and name lookup."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from thefuzz import fuzz

from .exceptions import ToolNotFoundError
from .utils.patterns import matches_filter

logger = logging.getLogger("mcp-catalog.catalog")

# Minimum fuzz.ratio for a catalog name to be offered as a suggestion
SUGGESTION_THRESHOLD = 60
MAX_SUGGESTIONS = 3


@dataclass(frozen=True)
class ToolDescriptor:
    """Self-description of a tool.

    The parameter schema is shared with the catalog owner and must be treated
    as read-only.
    """

    name: str
    description: str
    parameters: dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }


@dataclass(frozen=True)
class ExecuteOptions:
    """Options forwarded unchanged to a tool's execute call.

    Attributes:
        dry_run: Describe the call instead of performing it
        extra: Free-form options for specific tool implementations
    """

    dry_run: bool = False
    extra: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class Tool(Protocol):
    """Execution contract every catalog entry satisfies."""

    @property
    def descriptor(self) -> ToolDescriptor: ...

    @property
    def name(self) -> str: ...

    @property
    def description(self) -> str: ...

    @property
    def parameters(self) -> dict[str, Any]: ...

    async def execute(
        self, params: dict[str, Any] | str | None = None, options: ExecuteOptions | None = None
    ) -> Any: ...


class FunctionTool:
    """A tool backed by a local Python callable.

    The callable receives the parameter dict and may be sync or async. With
    ``dry_run`` set, the call is described instead of performed.
    """

    def __init__(
        self,
        descriptor: ToolDescriptor,
        fn: Callable[[dict[str, Any]], Any | Awaitable[Any]],
    ) -> None:
        self._descriptor = descriptor
        self._fn = fn

    @classmethod
    def from_function(
        cls,
        fn: Callable[[dict[str, Any]], Any | Awaitable[Any]],
        name: str | None = None,
        description: str | None = None,
        parameters: dict[str, Any] | None = None,
    ) -> FunctionTool:
        """Wrap a callable, defaulting name and description from the function."""
        descriptor = ToolDescriptor(
            name=name or fn.__name__,
            description=description or inspect.getdoc(fn) or "",
            parameters=parameters or {"type": "object", "properties": {}},
        )
        return cls(descriptor, fn)

    @property
    def descriptor(self) -> ToolDescriptor:
        return self._descriptor

    @property
    def name(self) -> str:
        return self._descriptor.name

    @property
    def description(self) -> str:
        return self._descriptor.description

    @property
    def parameters(self) -> dict[str, Any]:
        return self._descriptor.parameters

    async def execute(
        self, params: dict[str, Any] | str | None = None, options: ExecuteOptions | None = None
    ) -> Any:
        params = params if params is not None else {}
        if options is not None and options.dry_run:
            return {"dryRun": True, "tool": self.name, "params": params}

        result = self._fn(params)
        if inspect.isawaitable(result):
            result = await result
        return result

    def __repr__(self) -> str:
        return f"FunctionTool(name={self.name!r})"


class ToolCatalog:
    """Ordered, read-only mapping of tool name to tool.

    Iteration follows insertion order, which is also the tie-break order of
    search rankings.
    """

    def __init__(self, tools: Iterable[Tool] = ()) -> None:
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name in catalog: {tool.name}")
            self._tools[tool.name] = tool

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    @property
    def descriptors(self) -> list[ToolDescriptor]:
        return [tool.descriptor for tool in self._tools.values()]

    def get_tool(self, name: str) -> Tool | None:
        """Get a tool by exact name.

        Args:
            name: The tool name to look up

        Returns:
            The tool if found, None otherwise
        """
        return self._tools.get(name)

    def require_tool(self, name: str) -> Tool:
        """Get a tool by exact name, raising if it is absent.

        Raises:
            ToolNotFoundError: If the name is not in the catalog. Close
                matches are attached as suggestions.
        """
        tool = self._tools.get(name)
        if tool is None:
            suggestions = self.suggest(name)
            logger.warning(
                f"Tool {name} not found in catalog of {len(self._tools)} tools"
            )
            raise ToolNotFoundError(name, suggestions)
        return tool

    def suggest(self, name: str, limit: int = MAX_SUGGESTIONS) -> list[str]:
        """Return catalog names that closely resemble ``name``, best first."""
        scored = [
            (fuzz.ratio(name.lower(), candidate.lower()), position, candidate)
            for position, candidate in enumerate(self._tools)
        ]
        scored = [item for item in scored if item[0] >= SUGGESTION_THRESHOLD]
        scored.sort(key=lambda item: (-item[0], item[1]))
        return [candidate for _, _, candidate in scored[:limit]]

    def filter(self, patterns: str | Iterable[str]) -> ToolCatalog:
        """Return a new catalog with the tools whose names match the globs."""
        return ToolCatalog(tool for tool in self if matches_filter(tool.name, patterns))
