"""FastMCP server exposing the catalog meta-tools."""

import json
import logging
from typing import Annotated, Any

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from mcp_catalog.catalog import ExecuteOptions, ToolCatalog
from mcp_catalog.config import DiscoveryConfig, get_config_from_env
from mcp_catalog.exceptions import ToolCatalogError

from .chain import CHAIN_TOOL_NAME, ExecuteToolChainTool
from .discovery.index import ToolDiscoveryIndex
from .meta import EXECUTE_TOOL_NAME, SEARCH_TOOL_NAME, ExecuteToolTool, SearchToolsTool

logger = logging.getLogger("mcp-catalog.server")


def _dump(result: Any) -> str:
    return json.dumps(result, indent=2, ensure_ascii=False, default=str)


def create_meta_server(
    catalog: ToolCatalog,
    config: DiscoveryConfig | None = None,
    index: ToolDiscoveryIndex | None = None,
    name: str = "Tool Catalog",
) -> FastMCP:
    """Create a FastMCP server offering search and execution over a catalog.

    Instead of advertising every catalog tool, the server exposes three
    meta-tools: search, execute and execute-chain.

    Args:
        catalog: The tools to search and dispatch to
        config: Discovery configuration (read from the environment if None)
        index: A prebuilt discovery index; built on the first search if None
        name: Server name

    Returns:
        The configured FastMCP server.
    """
    config = config or get_config_from_env()
    search_tool = SearchToolsTool(catalog, config=config, index=index)
    execute_tool = ExecuteToolTool(catalog)
    chain_tool = ExecuteToolChainTool(catalog)

    server = FastMCP(
        name=name,
        instructions=(
            f"Provides access to {len(catalog)} tools through meta-tools. Use "
            f"{SEARCH_TOOL_NAME} to find tools for a task, then "
            f"{EXECUTE_TOOL_NAME} to run one."
        ),
    )

    @server.tool(
        name=SEARCH_TOOL_NAME,
        description=search_tool.description,
        tags={"meta", "read"},
    )
    async def meta_search_tools(
        query: Annotated[
            str, Field(description="Natural language description of the task")
        ],
        limit: Annotated[
            int,
            Field(
                description="Maximum number of tools to return",
                default=config.default_limit,
                ge=0,
            ),
        ] = config.default_limit,
        minScore: Annotated[  # noqa: N803
            float,
            Field(
                description="Minimum relevance score between 0 and 1",
                default=config.default_min_score,
                ge=0.0,
                le=1.0,
            ),
        ] = config.default_min_score,
        filterPatterns: Annotated[  # noqa: N803
            str | list[str] | None,
            Field(
                description="Optional glob patterns on tool names, '!' to exclude",
                default=None,
            ),
        ] = None,
    ) -> str:
        """Search the catalog for tools relevant to a task.

        Returns:
            JSON with the matching tools and their scores.
        """
        try:
            result = await search_tool.execute(
                {
                    "query": query,
                    "limit": limit,
                    "minScore": minScore,
                    "filterPatterns": filterPatterns,
                }
            )
        except ToolCatalogError as e:
            raise ToolError(str(e)) from e
        return _dump(result)

    @server.tool(
        name=EXECUTE_TOOL_NAME,
        description=execute_tool.description,
        tags={"meta", "write"},
    )
    async def meta_execute_tool(
        toolName: Annotated[  # noqa: N803
            str, Field(description=f"Exact tool name from {SEARCH_TOOL_NAME}")
        ],
        params: Annotated[
            dict[str, Any],
            Field(description="Parameters for the tool, matching its schema"),
        ],
        dryRun: Annotated[  # noqa: N803
            bool,
            Field(
                description="Describe the call without performing it",
                default=False,
            ),
        ] = False,
    ) -> str:
        """Execute a catalog tool by name.

        Returns:
            JSON with the tool's result.
        """
        try:
            result = await execute_tool.execute(
                {"toolName": toolName, "params": params},
                ExecuteOptions(dry_run=dryRun),
            )
        except ToolCatalogError as e:
            raise ToolError(str(e)) from e
        return _dump(result)

    @server.tool(
        name=CHAIN_TOOL_NAME,
        description=chain_tool.description,
        tags={"meta", "write"},
    )
    async def meta_execute_tool_chain(
        steps: Annotated[
            list[dict[str, Any]],
            Field(description="Steps with toolName, parameters and optional stepName, condition, continueOnError"),
        ],
        stopOnError: Annotated[  # noqa: N803
            bool, Field(description="Stop at the first failing step", default=True)
        ] = True,
        timeout: Annotated[
            float,
            Field(description="Maximum chain duration in seconds", default=300.0, gt=0),
        ] = 300.0,
    ) -> str:
        """Execute several catalog tools in sequence.

        Returns:
            JSON with per-step results.
        """
        try:
            result = await chain_tool.execute(
                {"steps": steps, "stopOnError": stopOnError, "timeout": timeout}
            )
        except ToolCatalogError as e:
            raise ToolError(str(e)) from e
        return _dump(result)

    logger.info(f"Meta server '{name}' created for {len(catalog)} tools")
    return server
