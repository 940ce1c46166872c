"""Exceptions raised by the tool catalog and its meta-tools."""


class ToolCatalogError(Exception):
    """Base class for all errors raised by mcp-catalog."""


class InvalidInputError(ToolCatalogError):
    """Raised when meta-tool input cannot be decoded or fails validation."""


class ToolNotFoundError(ToolCatalogError):
    """Raised when a tool name is not present in the catalog.

    Attributes:
        tool_name: The name that was requested
        suggestions: Close matches from the catalog, best first
    """

    def __init__(self, tool_name: str, suggestions: list[str] | None = None) -> None:
        self.tool_name = tool_name
        self.suggestions = suggestions or []
        message = f"Tool {tool_name} not found"
        if self.suggestions:
            message += f". Did you mean: {', '.join(self.suggestions)}?"
        super().__init__(message)


class DownstreamExecutionError(ToolCatalogError):
    """Raised when a delegated tool fails with an unrecognised exception."""

    def __init__(self, tool_name: str, original: BaseException) -> None:
        self.tool_name = tool_name
        self.original = original
        super().__init__(f"Error executing tool {tool_name}: {original}")
