"""Meta-tool servers for the tool catalog."""

from .app import create_meta_server
from .chain import CHAIN_TOOL_NAME, ExecuteToolChainTool
from .meta import (
    EXECUTE_TOOL_NAME,
    SEARCH_TOOL_NAME,
    ExecuteToolTool,
    SearchToolsTool,
    build_meta_tools,
    decode_input,
)

__all__ = [
    "CHAIN_TOOL_NAME",
    "EXECUTE_TOOL_NAME",
    "SEARCH_TOOL_NAME",
    "ExecuteToolChainTool",
    "ExecuteToolTool",
    "SearchToolsTool",
    "build_meta_tools",
    "create_meta_server",
    "decode_input",
]
