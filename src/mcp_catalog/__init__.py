"""Hybrid search and meta-execution over large tool catalogs."""

from .catalog import ExecuteOptions, FunctionTool, Tool, ToolCatalog, ToolDescriptor
from .config import DiscoveryConfig, get_config_from_env
from .exceptions import (
    DownstreamExecutionError,
    InvalidInputError,
    ToolCatalogError,
    ToolNotFoundError,
)

__version__ = "0.1.0"

__all__ = [
    "DiscoveryConfig",
    "DownstreamExecutionError",
    "ExecuteOptions",
    "FunctionTool",
    "InvalidInputError",
    "Tool",
    "ToolCatalog",
    "ToolCatalogError",
    "ToolDescriptor",
    "ToolNotFoundError",
    "get_config_from_env",
]
