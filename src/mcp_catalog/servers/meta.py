"""Meta-tools that let an agent search the catalog and execute a found tool.

Both meta-tools satisfy the catalog's ``Tool`` contract, so they can be handed
to any integration layer exactly like the tools they front.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mcp_catalog.catalog import ExecuteOptions, ToolCatalog, ToolDescriptor
from mcp_catalog.config import DiscoveryConfig
from mcp_catalog.exceptions import (
    DownstreamExecutionError,
    InvalidInputError,
    ToolCatalogError,
)

from .discovery.index import ToolDiscoveryIndex, build_search_index

logger = logging.getLogger("mcp-catalog.meta")

SEARCH_TOOL_NAME = "meta_search_tools"
EXECUTE_TOOL_NAME = "meta_execute_tool"

ModelT = TypeVar("ModelT", bound=BaseModel)


def decode_input(raw: Any) -> dict[str, Any]:
    """Turn meta-tool input into a dict.

    JSON strings are decoded first, for agents that can only emit strings.

    Raises:
        InvalidInputError: If the input is neither a mapping nor a string
            holding a JSON object
    """
    if raw is None:
        return {}
    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidInputError(f"Input is not valid JSON: {e}") from e
        if not isinstance(decoded, dict):
            raise InvalidInputError(
                f"Input JSON must be an object, got {type(decoded).__name__}"
            )
        return decoded
    if isinstance(raw, Mapping):
        return dict(raw)
    raise InvalidInputError(
        f"Invalid parameters type. Expected object or string, got {type(raw).__name__}"
    )


def validate_input(model: type[ModelT], raw: Any, tool_name: str) -> ModelT:
    """Decode raw input and validate it against a pydantic model."""
    data = decode_input(raw)
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise InvalidInputError(f"Invalid input for {tool_name}: {e}") from e


class SearchToolsInput(BaseModel):
    """Input of the search meta-tool."""

    model_config = ConfigDict(populate_by_name=True)

    query: str
    limit: int | None = Field(default=None, ge=0)
    min_score: float | None = Field(default=None, ge=0.0, le=1.0, alias="minScore")
    filter_patterns: str | list[str] | None = Field(
        default=None, alias="filterPatterns"
    )


class ExecuteToolInput(BaseModel):
    """Input of the execute meta-tool."""

    model_config = ConfigDict(populate_by_name=True)

    tool_name: str = Field(alias="toolName", min_length=1)
    params: dict[str, Any]


SEARCH_TOOL_PARAMETERS: dict[str, Any] = {
    "type": "object",
    "properties": {
        "query": {
            "type": "string",
            "description": (
                "Natural language description of the task, e.g. "
                "'list employees' or 'create a candidate'"
            ),
        },
        "limit": {
            "type": "integer",
            "description": "Maximum number of tools to return (default: 5)",
            "default": 5,
            "minimum": 0,
        },
        "minScore": {
            "type": "number",
            "description": "Minimum relevance score between 0 and 1 (default: 0.3)",
            "default": 0.3,
            "minimum": 0,
            "maximum": 1,
        },
        "filterPatterns": {
            "oneOf": [
                {"type": "string"},
                {"type": "array", "items": {"type": "string"}},
            ],
            "description": (
                "Optional glob patterns on tool names, e.g. 'hris_*' or "
                "'!*_delete_*' to exclude"
            ),
        },
    },
    "required": ["query"],
}

EXECUTE_TOOL_PARAMETERS: dict[str, Any] = {
    "type": "object",
    "properties": {
        "toolName": {
            "type": "string",
            "description": f"Exact name of a tool returned by {SEARCH_TOOL_NAME}",
        },
        "params": {
            "type": "object",
            "description": "Parameters for the tool, matching its parameter schema",
            "additionalProperties": True,
        },
    },
    "required": ["toolName", "params"],
}


class SearchToolsTool:
    """Meta-tool ranking catalog tools against a natural language query.

    The discovery index is built on first use unless one is supplied, and is
    then reused for every later search.
    """

    def __init__(
        self,
        catalog: ToolCatalog,
        config: DiscoveryConfig | None = None,
        index: ToolDiscoveryIndex | None = None,
    ) -> None:
        self._catalog = catalog
        self._config = config or DiscoveryConfig()
        self._index = index
        self._lock = threading.Lock()
        self._descriptor = ToolDescriptor(
            name=SEARCH_TOOL_NAME,
            description=(
                "Search for relevant tools by describing the task in natural "
                "language. Returns matching tool names, descriptions, parameter "
                f"schemas and relevance scores. Call {EXECUTE_TOOL_NAME} with a "
                "returned tool name to run it."
            ),
            parameters=SEARCH_TOOL_PARAMETERS,
        )

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

    @property
    def is_built(self) -> bool:
        """Check if the index has been built."""
        return self._index is not None

    @property
    def index(self) -> ToolDiscoveryIndex:
        """The discovery index, built on first access."""
        if self._index is None:
            with self._lock:
                if self._index is None:
                    self._index = build_search_index(self._catalog, self._config)
        return self._index

    def search(self, request: SearchToolsInput) -> dict[str, Any]:
        """Run a validated search request."""
        limit = self._config.default_limit if request.limit is None else request.limit
        min_score = (
            self._config.default_min_score
            if request.min_score is None
            else request.min_score
        )
        results = self.index.search(
            request.query,
            limit=limit,
            min_score=min_score,
            filter_patterns=request.filter_patterns,
        )
        return {"tools": [result.to_dict() for result in results]}

    async def execute(
        self, params: dict[str, Any] | str | None = None, options: ExecuteOptions | None = None
    ) -> dict[str, Any]:
        """Search the catalog.

        Args:
            params: ``{query, limit?, minScore?, filterPatterns?}`` as a dict
                or JSON string
            options: Unused, accepted for the tool contract

        Returns:
            ``{"tools": [...]}``, empty when nothing matches

        Raises:
            InvalidInputError: If the input is malformed
        """
        request = validate_input(SearchToolsInput, params, self.name)
        return self.search(request)


class ExecuteToolTool:
    """Meta-tool dispatching a call to a catalog tool by name."""

    def __init__(self, catalog: ToolCatalog) -> None:
        self._catalog = catalog
        self._descriptor = ToolDescriptor(
            name=EXECUTE_TOOL_NAME,
            description=(
                "Execute a tool by its exact name with the given parameters. "
                f"Use {SEARCH_TOOL_NAME} first to find the tool name and its "
                "parameter schema."
            ),
            parameters=EXECUTE_TOOL_PARAMETERS,
        )

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
        """Execute the named tool.

        Args:
            params: ``{toolName, params}`` as a dict or JSON string
            options: Forwarded unchanged to the target tool

        Returns:
            Whatever the target tool returns

        Raises:
            InvalidInputError: If the input is malformed
            ToolNotFoundError: If the tool is not in the catalog
            DownstreamExecutionError: If the tool fails with an error that is
                not already a catalog error
        """
        request = validate_input(ExecuteToolInput, params, self.name)
        tool = self._catalog.require_tool(request.tool_name)

        logger.debug(f"Executing tool {request.tool_name}")
        try:
            return await tool.execute(request.params, options)
        except ToolCatalogError:
            raise
        except Exception as e:
            logger.error(f"Tool {request.tool_name} failed: {e}")
            raise DownstreamExecutionError(request.tool_name, e) from e


def build_meta_tools(
    catalog: ToolCatalog,
    config: DiscoveryConfig | None = None,
    index: ToolDiscoveryIndex | None = None,
) -> ToolCatalog:
    """Create the search and execute meta-tools for a catalog.

    Args:
        catalog: The tools to search and dispatch to
        config: Discovery configuration (defaults used if None)
        index: A prebuilt index for the catalog; built lazily if None

    Returns:
        A catalog holding the two meta-tools
    """
    return ToolCatalog(
        [
            SearchToolsTool(catalog, config=config, index=index),
            ExecuteToolTool(catalog),
        ]
    )
